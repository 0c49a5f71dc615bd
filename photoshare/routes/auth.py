import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from bson.errors import InvalidId
from bson.objectid import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from ..config import JWT_ALGORITHM, JWT_EXPIRY_DAYS, JWT_SECRET
from ..database import get_db
from ..models.user import UserLogin, UserOut
from ..utils.stats import user_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# Missing or non-Bearer headers reach get_current_user as None so they get a 401
security = HTTPBearer(auto_error=False)


# ----------------- UTILITY -----------------
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def create_access_token(user_doc: dict) -> str:
    payload = {
        "sub": str(user_doc["_id"]),
        "login_name": user_doc["login_name"],
        "exp": datetime.utcnow() + timedelta(days=JWT_EXPIRY_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
):
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        user_id = ObjectId(payload["sub"])
    except (KeyError, InvalidId, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user_doc = db.users.find_one({"_id": user_id})
    if not user_doc:
        raise HTTPException(status_code=401, detail="User not found")
    return user_doc


# ----------------- LOGIN -----------------
@router.post("/login")
def login(user: UserLogin, db: Database = Depends(get_db)):
    user_doc = db.users.find_one({"login_name": user.login_name.strip()})
    if not user_doc or not check_password(user.password, user_doc["passwordHash"]):
        logger.warning("Failed login for %s", user.login_name)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info("User %s logged in", user_doc["login_name"])
    return {
        "access_token": create_access_token(user_doc),
        "token_type": "bearer",
        "user": user_profile(db, user_doc, user_doc["_id"]).model_dump(by_alias=True),
    }


# ----------------- PROFILE -----------------
@router.get("/profile", response_model=UserOut)
def get_profile(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return user_profile(db, current_user, current_user["_id"])
