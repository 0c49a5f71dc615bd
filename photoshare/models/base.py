from pydantic import BaseModel, ConfigDict, Field


class DocumentOut(BaseModel):
    """Response model for a stored document; ``id`` goes over the wire as ``_id``."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
