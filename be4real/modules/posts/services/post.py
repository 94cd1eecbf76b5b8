from typing import List, Optional
import base64
import binascii
import logging
import re
import uuid

from sqlalchemy.orm import Session

from be4real.core.config import settings
from be4real.core.errors import InvalidInputError, NotFoundError
from be4real.modules.posts.models.post import Post
from be4real.modules.user_management.services.user import get_user

logger = logging.getLogger("be4real")

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL)

def _decoded_image_size(img_data: str) -> int:
    """Validate a base64 image (optionally a data URL) and return its decoded size"""
    match = _DATA_URL.match(img_data)
    if match:
        if not match.group("mime").startswith("image/"):
            raise InvalidInputError("Image data must be an image")
        payload = match.group("payload")
    else:
        payload = img_data

    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Image data is not valid base64")

    if not decoded:
        raise InvalidInputError("Image data is empty")
    return len(decoded)

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()

def get_post_or_404(db: Session, post_id: str) -> Post:
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post

def get_user_posts(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> List[Post]:
    """Get posts by user ID, newest first"""
    logger.debug(f"Getting posts for user ID: {user_id} with skip={skip}, limit={limit}")
    return (
        db.query(Post)
        .filter(Post.user_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

def create_post(db: Session, img_data: str, user_id: str) -> Post:
    """Create new post for a user"""
    if not img_data:
        raise InvalidInputError("Missing image data")

    size = _decoded_image_size(img_data)
    if size > settings.MAX_IMAGE_SIZE:
        raise InvalidInputError(f"Image exceeds {settings.MAX_IMAGE_SIZE} bytes")

    owner = get_user(db, user_id)
    if not owner:
        raise NotFoundError("User not found")

    post = Post(
        id=str(uuid.uuid4()),
        user_id=owner.id,
        img_data=img_data,
    )
    db.add(post)
    db.commit()
    db.refresh(post)

    logger.info(f"Created post {post.id} for user {owner.id} ({size} bytes)")
    return post
