from typing import Dict, Iterable, List, Optional

from bson.objectid import ObjectId
from pymongo.database import Database

from ..models.user import UserOut, UserSummary
from .friends import friend_ids


def _counts(collection, pipeline) -> Dict[ObjectId, int]:
    return {row["_id"]: row["count"] for row in collection.aggregate(pipeline)}


def photo_counts(db: Database, user_ids: List[ObjectId]) -> Dict[ObjectId, int]:
    return _counts(db.photos, [
        {"$match": {"user_id": {"$in": user_ids}}},
        {"$group": {"_id": "$user_id", "count": {"$sum": 1}}},
    ])


def comment_counts(db: Database, user_ids: List[ObjectId]) -> Dict[ObjectId, int]:
    # First match narrows to photos via the index, second keeps only the
    # unwound comments that belong to the requested authors.
    return _counts(db.photos, [
        {"$match": {"comments.user_id": {"$in": user_ids}}},
        {"$unwind": "$comments"},
        {"$match": {"comments.user_id": {"$in": user_ids}}},
        {"$group": {"_id": "$comments.user_id", "count": {"$sum": 1}}},
    ])


def friend_counts(db: Database, user_ids: List[ObjectId]) -> Dict[ObjectId, int]:
    return _counts(db.friendships, [
        {"$match": {"members": {"$in": user_ids}}},
        {"$unwind": "$members"},
        {"$match": {"members": {"$in": user_ids}}},
        {"$group": {"_id": "$members", "count": {"$sum": 1}}},
    ])


def user_summaries(db: Database, users: Iterable[dict], viewer_id: Optional[ObjectId]) -> List[UserSummary]:
    users = list(users)
    ids = [user["_id"] for user in users]
    photos = photo_counts(db, ids)
    comments = comment_counts(db, ids)
    friends = friend_counts(db, ids)
    viewer_friends = friend_ids(db, viewer_id) if viewer_id else set()

    return [
        UserSummary(
            id=str(user["_id"]),
            first_name=user["first_name"],
            last_name=user["last_name"],
            photo_count=photos.get(user["_id"], 0),
            comment_count=comments.get(user["_id"], 0),
            friend_count=friends.get(user["_id"], 0),
            is_friend=user["_id"] in viewer_friends,
        )
        for user in users
    ]


def user_profile(db: Database, user: dict, viewer_id: Optional[ObjectId]) -> UserOut:
    summary = user_summaries(db, [user], viewer_id)[0]
    return UserOut(
        **summary.model_dump(),
        login_name=user["login_name"],
        location=user.get("location", ""),
        description=user.get("description", ""),
        occupation=user.get("occupation", ""),
    )
