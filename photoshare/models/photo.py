from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from .base import DocumentOut
from .user import UserBrief


class CommentBody(BaseModel):
    comment: str


class CommentOut(DocumentOut):
    comment: str
    date_time: datetime
    user_id: str
    user: Optional[UserBrief] = None


class PhotoOut(DocumentOut):
    user_id: str
    file_name: str
    date_time: datetime
    user: Optional[UserBrief] = None
    comments: List[CommentOut] = []
    like_count: int = 0
    is_liked: bool = False


class PhotoRef(DocumentOut):
    """The photo a comment search hit belongs to."""
    file_name: str
    user_id: str
    owner: Optional[UserBrief] = None
    like_count: int = 0
    is_liked: bool = False


class CommentHit(DocumentOut):
    comment: str
    date_time: datetime
    user: Optional[UserBrief] = None
    photo: PhotoRef


class UserComment(DocumentOut):
    comment: str
    date_time: datetime
    photo_id: str
    file_name: str


class LikeStatus(BaseModel):
    like_count: int
    is_liked: bool


class UploadResult(BaseModel):
    message: str
    photo: PhotoOut
