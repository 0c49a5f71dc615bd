from pydantic import BaseModel
from typing import Optional

from .base import DocumentOut


class UserCreate(BaseModel):
    login_name: str
    password: str
    first_name: str
    last_name: str
    location: str = ""
    description: str = ""
    occupation: str = ""


class UserUpdate(BaseModel):
    login_name: str
    first_name: str
    last_name: str
    location: Optional[str] = ""
    description: Optional[str] = ""
    occupation: Optional[str] = ""


class UserLogin(BaseModel):
    login_name: str
    password: str


class UserBrief(DocumentOut):
    """Display record attached to photos, comments and search results."""
    first_name: str
    last_name: str


class FriendOut(UserBrief):
    login_name: str


class UserSummary(UserBrief):
    photo_count: int = 0
    comment_count: int = 0
    friend_count: int = 0
    is_friend: bool = False


class UserOut(UserSummary):
    login_name: str
    location: str = ""
    description: str = ""
    occupation: str = ""


class FriendStatus(BaseModel):
    message: str
    is_friend: bool
    friend_count: int


class Registered(BaseModel):
    login_name: str


class UserUpdated(BaseModel):
    user: UserOut
