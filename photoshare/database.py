import logging

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from .config import DB_NAME, MONGO_URI

logger = logging.getLogger(__name__)

client = MongoClient(MONGO_URI)
db = client[DB_NAME]

logger.debug("MONGO_URI = %s, DB_NAME = %s", MONGO_URI, DB_NAME)


def get_db() -> Database:
    """FastAPI dependency returning the shared database handle."""
    return db


def ensure_indexes(database: Database):
    """Create the indexes the counters, searches and friend graph rely on."""
    database.users.create_index([("login_name", ASCENDING)], unique=True)
    database.photos.create_index([("user_id", ASCENDING)])
    database.photos.create_index([("comments.user_id", ASCENDING)])
    database.friendships.create_index([("members", ASCENDING)])
