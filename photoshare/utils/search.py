import re
from typing import List, Optional, Pattern

from bson.objectid import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from ..models.photo import CommentHit, PhotoOut
from ..models.user import UserSummary
from .stats import user_summaries
from .views import comment_view, load_briefs, photo_ref, photo_views, referenced_users

USER_SEARCH_FIELDS = ("first_name", "last_name", "login_name", "occupation", "location")


def build_pattern(query: Optional[str]) -> Optional[Pattern]:
    """Compile the search pattern, or return None for a blank query."""
    query = (query or "").strip()
    if not query:
        return None
    return re.compile(re.escape(query), re.IGNORECASE)


def matching_users(db: Database, pattern: Pattern, projection=None) -> List[dict]:
    return list(db.users.find({"$or": [{field: pattern} for field in USER_SEARCH_FIELDS]}, projection))


def search_users(db: Database, query: Optional[str], viewer_id: ObjectId) -> List[UserSummary]:
    pattern = build_pattern(query)
    if pattern is None:
        return []
    return user_summaries(db, matching_users(db, pattern), viewer_id)


def search_photos(db: Database, query: Optional[str], viewer_id: ObjectId) -> List[PhotoOut]:
    pattern = build_pattern(query)
    if pattern is None:
        return []

    user_ids = [user["_id"] for user in matching_users(db, pattern, {"_id": 1})]
    photos = db.photos.find({
        "$or": [
            {"file_name": pattern},
            {"user_id": {"$in": user_ids}},
            {"comments.comment": pattern},
        ]
    }).sort("date_time", DESCENDING)
    return photo_views(db, photos, viewer_id)


def search_comments(db: Database, query: Optional[str], viewer_id: ObjectId) -> List[CommentHit]:
    pattern = build_pattern(query)
    if pattern is None:
        return []

    user_ids = {user["_id"] for user in matching_users(db, pattern, {"_id": 1})}
    photos = list(db.photos.find({
        "$or": [
            {"comments.comment": pattern},
            {"comments.user_id": {"$in": list(user_ids)}},
        ]
    }))
    users = load_briefs(db, referenced_users(photos))

    results = []
    for photo in photos:
        ref = photo_ref(photo, users, viewer_id)
        for comment in photo.get("comments", []):
            if not (pattern.search(comment.get("comment", "")) or comment.get("user_id") in user_ids):
                continue
            view = comment_view(comment, users)
            results.append(CommentHit(
                id=view.id,
                comment=view.comment,
                date_time=view.date_time,
                user=view.user,
                photo=ref,
            ))
    return results
