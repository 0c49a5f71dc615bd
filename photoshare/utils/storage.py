import logging
import os
import random
import shutil
import time

from fastapi import UploadFile

from ..config import IMAGES_DIR

logger = logging.getLogger(__name__)


def get_images_dir() -> str:
    """FastAPI dependency naming the directory uploaded photos are written to."""
    return IMAGES_DIR


def unique_file_name(original_name: str) -> str:
    _, ext = os.path.splitext(original_name or "")
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext.lower()}"


def save_upload(images_dir: str, file: UploadFile) -> str:
    """Write the upload under a fresh name and return that name."""
    os.makedirs(images_dir, exist_ok=True)
    file_name = unique_file_name(file.filename)
    with open(os.path.join(images_dir, file_name), "wb") as out:
        shutil.copyfileobj(file.file, out)
    logger.info("Stored upload %s as %s", file.filename, file_name)
    return file_name


def remove_file(images_dir: str, file_name: str) -> bool:
    path = os.path.join(images_dir, os.path.basename(file_name))
    if not os.path.exists(path):
        logger.warning("Stored file %s already missing", file_name)
        return False
    os.remove(path)
    return True
