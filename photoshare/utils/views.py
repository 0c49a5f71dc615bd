from typing import Dict, Iterable, Optional

from bson.objectid import ObjectId
from pymongo.database import Database

from ..models.photo import CommentOut, PhotoOut, PhotoRef
from ..models.user import UserBrief

BRIEF_FIELDS = {"_id": 1, "first_name": 1, "last_name": 1}


def brief(user: dict) -> UserBrief:
    return UserBrief(id=str(user["_id"]), first_name=user["first_name"], last_name=user["last_name"])


def load_briefs(db: Database, user_ids: Iterable[ObjectId]) -> Dict[ObjectId, UserBrief]:
    """Lookup table of display records for exactly the given user ids."""
    ids = list(set(user_ids))
    if not ids:
        return {}
    return {user["_id"]: brief(user) for user in db.users.find({"_id": {"$in": ids}}, BRIEF_FIELDS)}


def referenced_users(photos: Iterable[dict]):
    """Yield every owner and commenter id mentioned by the photos."""
    for photo in photos:
        if photo.get("user_id"):
            yield photo["user_id"]
        for comment in photo.get("comments", []):
            if comment.get("user_id"):
                yield comment["user_id"]


def like_state(photo: dict, viewer_id: Optional[ObjectId]):
    likes = photo.get("likes", [])
    return len(likes), viewer_id in likes


def comment_view(comment: dict, users: Dict[ObjectId, UserBrief]) -> CommentOut:
    return CommentOut(
        id=str(comment["_id"]),
        comment=comment["comment"],
        date_time=comment["date_time"],
        user_id=str(comment["user_id"]),
        user=users.get(comment["user_id"]),
    )


def photo_view(photo: dict, users: Dict[ObjectId, UserBrief], viewer_id: Optional[ObjectId]) -> PhotoOut:
    like_count, is_liked = like_state(photo, viewer_id)
    return PhotoOut(
        id=str(photo["_id"]),
        user_id=str(photo["user_id"]),
        file_name=photo["file_name"],
        date_time=photo["date_time"],
        user=users.get(photo["user_id"]),
        comments=[comment_view(c, users) for c in photo.get("comments", [])],
        like_count=like_count,
        is_liked=is_liked,
    )


def photo_ref(photo: dict, users: Dict[ObjectId, UserBrief], viewer_id: Optional[ObjectId]) -> PhotoRef:
    like_count, is_liked = like_state(photo, viewer_id)
    return PhotoRef(
        id=str(photo["_id"]),
        file_name=photo["file_name"],
        user_id=str(photo["user_id"]),
        owner=users.get(photo["user_id"]),
        like_count=like_count,
        is_liked=is_liked,
    )


def photo_views(db: Database, photos: Iterable[dict], viewer_id: Optional[ObjectId]):
    photos = list(photos)
    users = load_briefs(db, referenced_users(photos))
    return [photo_view(photo, users, viewer_id) for photo in photos]
