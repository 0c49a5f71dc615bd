import logging
from datetime import datetime
from typing import Set

from bson.objectid import ObjectId
from pymongo.database import Database

logger = logging.getLogger(__name__)


def edge_key(a: ObjectId, b: ObjectId) -> str:
    low, high = sorted((str(a), str(b)))
    return f"{low}:{high}"


def add_friend(db: Database, a: ObjectId, b: ObjectId) -> bool:
    """Create the edge between ``a`` and ``b``. Returns False if it already existed."""
    if a == b:
        raise ValueError("A user cannot befriend themselves")
    members = sorted((a, b), key=str)
    result = db.friendships.update_one(
        {"_id": edge_key(a, b)},
        {"$setOnInsert": {"members": members, "created_at": datetime.utcnow()}},
        upsert=True,
    )
    created = result.upserted_id is not None
    if created:
        logger.info("Friend edge %s created", edge_key(a, b))
    return created


def remove_friend(db: Database, a: ObjectId, b: ObjectId) -> bool:
    """Delete the edge between ``a`` and ``b``. Returns False if there was none."""
    result = db.friendships.delete_one({"_id": edge_key(a, b)})
    removed = result.deleted_count == 1
    if removed:
        logger.info("Friend edge %s removed", edge_key(a, b))
    return removed


def are_friends(db: Database, a: ObjectId, b: ObjectId) -> bool:
    return db.friendships.find_one({"_id": edge_key(a, b)}, {"_id": 1}) is not None


def friend_ids(db: Database, user_id: ObjectId) -> Set[ObjectId]:
    ids = set()
    for edge in db.friendships.find({"members": user_id}, {"members": 1}):
        ids.update(member for member in edge["members"] if member != user_id)
    return ids


def friend_count(db: Database, user_id: ObjectId) -> int:
    return db.friendships.count_documents({"members": user_id})
