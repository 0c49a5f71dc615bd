from bson.errors import InvalidId
from bson.objectid import ObjectId
from fastapi import HTTPException


def parse_object_id(value: str, kind: str) -> ObjectId:
    """Turn a path parameter into an ObjectId, answering 400 when it is malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID")
