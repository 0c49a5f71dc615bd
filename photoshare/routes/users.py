import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..database import get_db
from ..models.user import (
    FriendOut,
    FriendStatus,
    Registered,
    UserCreate,
    UserOut,
    UserSummary,
    UserUpdate,
    UserUpdated,
)
from ..utils import friends
from ..utils.ids import parse_object_id
from ..utils.search import search_users
from ..utils.stats import user_profile, user_summaries
from .auth import get_current_user, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


def _load_user(db: Database, user_id: str, detail: str = "User not found") -> dict:
    user = db.users.find_one({"_id": parse_object_id(user_id, "user")})
    if not user:
        raise HTTPException(status_code=400, detail=detail)
    return user


# --- Listing & Search ---
@router.get("/list", response_model=List[UserSummary])
def list_users(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return user_summaries(db, db.users.find({}), current_user["_id"])


@router.get("/search", response_model=List[UserSummary])
def search(q: Optional[str] = None, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return search_users(db, q, current_user["_id"])


# --- Registration ---
@router.post("", response_model=Registered)
def register(user: UserCreate, db: Database = Depends(get_db)):
    login_name = user.login_name.strip()
    first_name = user.first_name.strip()
    last_name = user.last_name.strip()
    if not (login_name and user.password.strip() and first_name and last_name):
        raise HTTPException(
            status_code=400,
            detail="login_name, password, first_name, and last_name must be non-empty",
        )
    if db.users.find_one({"login_name": login_name}):
        raise HTTPException(status_code=400, detail="login_name already exists")

    user_doc = {
        "login_name": login_name,
        "passwordHash": hash_password(user.password),
        "first_name": first_name,
        "last_name": last_name,
        "location": user.location or "",
        "description": user.description or "",
        "occupation": user.occupation or "",
    }
    try:
        db.users.insert_one(user_doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="login_name already exists")

    logger.info("Registered user %s", login_name)
    return Registered(login_name=login_name)


# --- Friends ---
@router.post("/friends/{user_id}", response_model=FriendStatus)
def add_friend(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    target = _load_user(db, user_id, "Target user not found")
    if target["_id"] == current_user["_id"]:
        raise HTTPException(status_code=400, detail="You cannot add yourself as a friend")
    friends.add_friend(db, current_user["_id"], target["_id"])
    return FriendStatus(
        message="Friend added",
        is_friend=True,
        friend_count=friends.friend_count(db, target["_id"]),
    )


@router.delete("/friends/{user_id}", response_model=FriendStatus)
def remove_friend(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    target = _load_user(db, user_id, "Target user not found")
    if target["_id"] == current_user["_id"]:
        raise HTTPException(status_code=400, detail="You cannot unfriend yourself")
    friends.remove_friend(db, current_user["_id"], target["_id"])
    return FriendStatus(
        message="Friend removed",
        is_friend=False,
        friend_count=friends.friend_count(db, target["_id"]),
    )


@router.get("/{user_id}/friends", response_model=List[FriendOut])
def list_friends(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    user = _load_user(db, user_id)
    ids = list(friends.friend_ids(db, user["_id"]))
    docs = db.users.find({"_id": {"$in": ids}}, {"first_name": 1, "last_name": 1, "login_name": 1})
    return [
        FriendOut(
            id=str(doc["_id"]),
            first_name=doc["first_name"],
            last_name=doc["last_name"],
            login_name=doc["login_name"],
        )
        for doc in docs
    ]


# --- Profile ---
@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return user_profile(db, _load_user(db, user_id), current_user["_id"])


@router.put("/{user_id}", response_model=UserUpdated)
def update_user(
    user_id: str,
    body: UserUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if parse_object_id(user_id, "user") != current_user["_id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    login_name = body.login_name.strip()
    first_name = body.first_name.strip()
    last_name = body.last_name.strip()
    if not (login_name and first_name and last_name):
        raise HTTPException(status_code=400, detail="Required fields cannot be empty")

    if login_name != current_user["login_name"]:
        existing = db.users.find_one({"login_name": login_name})
        if existing and existing["_id"] != current_user["_id"]:
            raise HTTPException(status_code=400, detail="login_name already exists")

    update_data = {
        "first_name": first_name,
        "last_name": last_name,
        "login_name": login_name,
        "location": body.location or "",
        "description": body.description or "",
        "occupation": body.occupation or "",
    }
    try:
        db.users.update_one({"_id": current_user["_id"]}, {"$set": update_data})
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="login_name already exists")

    user_doc = db.users.find_one({"_id": current_user["_id"]})
    # Viewing yourself never counts as a friendship
    return UserUpdated(user=user_profile(db, user_doc, current_user["_id"]))
