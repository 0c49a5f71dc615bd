import logging
from datetime import datetime
from typing import List, Optional

from bson.objectid import ObjectId
from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from pymongo import ReturnDocument
from pymongo.database import Database

from ..database import get_db
from ..models.photo import CommentBody, CommentHit, LikeStatus, PhotoOut, UploadResult, UserComment
from ..utils.ids import parse_object_id
from ..utils.search import search_comments, search_photos
from ..utils.storage import get_images_dir, remove_file, save_upload
from ..utils.views import photo_views
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photo", tags=["photo"])


def _load_photo(db: Database, photo_id: str) -> dict:
    photo = db.photos.find_one({"_id": parse_object_id(photo_id, "photo")})
    if not photo:
        raise HTTPException(status_code=400, detail="Photo not found")
    return photo


def _find_comment(photo: dict, comment_id: str) -> dict:
    cid = parse_object_id(comment_id, "comment")
    for comment in photo.get("comments", []):
        if comment["_id"] == cid:
            return comment
    raise HTTPException(status_code=400, detail="Comment not found")


def _comment_text(body: CommentBody) -> str:
    text = body.comment.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")
    return text


# --- Search ---
@router.get("/search", response_model=List[PhotoOut])
def search(q: Optional[str] = None, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return search_photos(db, q, current_user["_id"])


@router.get("/comments/search", response_model=List[CommentHit])
def comment_search(q: Optional[str] = None, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return search_comments(db, q, current_user["_id"])


# --- Listing ---
@router.get("/user/{user_id}", response_model=List[PhotoOut])
def photos_of_user(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    owner_id = parse_object_id(user_id, "user")
    if not db.users.find_one({"_id": owner_id}, {"_id": 1}):
        raise HTTPException(status_code=400, detail="User not found")
    photos = db.photos.find({"user_id": owner_id}).sort("date_time", 1)
    return photo_views(db, photos, current_user["_id"])


@router.get("/commentsOf/{user_id}", response_model=List[UserComment])
def comments_of_user(user_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    author_id = parse_object_id(user_id, "user")
    if not db.users.find_one({"_id": author_id}, {"_id": 1}):
        raise HTTPException(status_code=400, detail="User not found")

    result = []
    for photo in db.photos.find({"comments.user_id": author_id}).sort("date_time", 1):
        for comment in photo.get("comments", []):
            if comment["user_id"] != author_id:
                continue
            result.append(UserComment(
                id=str(comment["_id"]),
                comment=comment["comment"],
                date_time=comment["date_time"],
                photo_id=str(photo["_id"]),
                file_name=photo["file_name"],
            ))
    return result


# --- Upload ---
@router.post("/new", response_model=UploadResult)
def upload_photo(
    photo: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    images_dir: str = Depends(get_images_dir),
):
    if photo is None or not photo.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if not (photo.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image uploads are allowed")

    photo_doc = {
        "file_name": save_upload(images_dir, photo),
        "user_id": current_user["_id"],
        "date_time": datetime.utcnow(),
        "likes": [],
        "comments": [],
    }
    photo_doc["_id"] = db.photos.insert_one(photo_doc).inserted_id
    logger.info("User %s uploaded photo %s", current_user["login_name"], photo_doc["_id"])
    return UploadResult(
        message="Photo uploaded successfully",
        photo=photo_views(db, [photo_doc], current_user["_id"])[0],
    )


# --- Single photo ---
@router.get("/{photo_id}", response_model=PhotoOut)
def get_photo(photo_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    return photo_views(db, [_load_photo(db, photo_id)], current_user["_id"])[0]


@router.delete("/{photo_id}")
def delete_photo(
    photo_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    images_dir: str = Depends(get_images_dir),
):
    photo = _load_photo(db, photo_id)
    if photo["user_id"] != current_user["_id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    remove_file(images_dir, photo["file_name"])
    db.photos.delete_one({"_id": photo["_id"]})
    logger.info("User %s deleted photo %s", current_user["login_name"], photo["_id"])
    return {"message": "Photo deleted successfully"}


# --- Like/Unlike ---
@router.post("/{photo_id}/like", response_model=LikeStatus)
def toggle_like(photo_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    pid = parse_object_id(photo_id, "photo")
    user_id = current_user["_id"]

    # Each branch only matches when the caller's membership is as expected,
    # so two racing toggles cannot add the same liker twice.
    photo = db.photos.find_one_and_update(
        {"_id": pid, "likes": {"$ne": user_id}},
        {"$addToSet": {"likes": user_id}},
        projection={"likes": 1},
        return_document=ReturnDocument.AFTER,
    )
    is_liked = photo is not None
    if not is_liked:
        photo = db.photos.find_one_and_update(
            {"_id": pid},
            {"$pull": {"likes": user_id}},
            projection={"likes": 1},
            return_document=ReturnDocument.AFTER,
        )
    if photo is None:
        raise HTTPException(status_code=400, detail="Photo not found")
    return LikeStatus(like_count=len(photo.get("likes", [])), is_liked=is_liked)


# --- Comments ---
@router.post("/commentsOfPhoto/{photo_id}")
def add_comment(
    photo_id: str,
    body: CommentBody = Body(...),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    text = _comment_text(body)
    photo = _load_photo(db, photo_id)
    comment = {
        "_id": ObjectId(),
        "comment": text,
        "user_id": current_user["_id"],
        "date_time": datetime.utcnow(),
    }
    db.photos.update_one({"_id": photo["_id"]}, {"$push": {"comments": comment}})
    return {"message": "Comment added successfully", "comment_id": str(comment["_id"])}


@router.put("/commentsOfPhoto/{photo_id}/{comment_id}")
def update_comment(
    photo_id: str,
    comment_id: str,
    body: CommentBody = Body(...),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    text = _comment_text(body)
    photo = _load_photo(db, photo_id)
    comment = _find_comment(photo, comment_id)
    if comment["user_id"] != current_user["_id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    db.photos.update_one(
        {"_id": photo["_id"], "comments._id": comment["_id"]},
        {"$set": {"comments.$.comment": text}},
    )
    return {"message": "Comment updated successfully"}


@router.delete("/commentsOfPhoto/{photo_id}/{comment_id}")
def delete_comment(
    photo_id: str,
    comment_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    photo = _load_photo(db, photo_id)
    comment = _find_comment(photo, comment_id)
    if comment["user_id"] != current_user["_id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    db.photos.update_one({"_id": photo["_id"]}, {"$pull": {"comments": {"_id": comment["_id"]}}})
    return {"message": "Comment deleted successfully"}
