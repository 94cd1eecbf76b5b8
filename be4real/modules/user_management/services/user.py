from typing import Optional
import logging
import uuid

from sqlalchemy.orm import Session

from be4real.core.errors import NotFoundError
from be4real.modules.user_management.models.user import User
from be4real.modules.posts.models.post import Post

logger = logging.getLogger("be4real")

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username"""
    return db.query(User).filter(User.username == username).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email (emails are stored lowercase)"""
    return db.query(User).filter(User.email == email.strip().lower()).first()

def get_user_by_post_id(db: Session, post_id: str) -> Optional[User]:
    """Get the owner of a post"""
    return (
        db.query(User)
        .join(Post, Post.user_id == User.id)
        .filter(Post.id == post_id)
        .first()
    )

def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True

def resolve_user(db: Session, identifier: str) -> User:
    """
    Find a user by user ID, post ID or username, in that order.
    """
    lookups = []
    if _is_uuid(identifier):
        lookups += [get_user, get_user_by_post_id]
    lookups.append(get_user_by_username)

    for lookup in lookups:
        user = lookup(db, identifier)
        if user:
            return user

    raise NotFoundError("User not found")
