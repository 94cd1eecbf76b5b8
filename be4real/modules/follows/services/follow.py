from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from be4real.core.errors import ConflictError, InvalidInputError, NotFoundError
from be4real.modules.follows.models.follow import Follow
from be4real.modules.user_management.models.user import User
from be4real.modules.user_management.services.user import get_user

logger = logging.getLogger("be4real")

def get_follow(db: Session, follower_id: str, followee_id: str) -> Optional[Follow]:
    """Get the follow edge between two users"""
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.followee_id == followee_id,
    ).first()

def is_following(db: Session, follower_id: str, followee_id: str) -> bool:
    return get_follow(db, follower_id, followee_id) is not None

def _adjust_counter(db: Session, user_id: str, column, delta: int) -> None:
    query = db.query(User).filter(User.id == user_id)
    if delta < 0:
        query = query.filter(column >= -delta)
    query.update({column: column + delta}, synchronize_session=False)

def follow_user(db: Session, follower_id: str, followee_id: str) -> Follow:
    """Start following a user, bumping both users' counters"""
    if follower_id == followee_id:
        raise InvalidInputError("Cannot follow yourself")
    if not get_user(db, followee_id):
        raise NotFoundError("User not found")
    if is_following(db, follower_id, followee_id):
        raise ConflictError("Already following this user")

    follow = Follow(follower_id=follower_id, followee_id=followee_id)
    db.add(follow)
    try:
        db.flush()
        _adjust_counter(db, follower_id, User.following_count, 1)
        _adjust_counter(db, followee_id, User.followers_count, 1)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already following this user")

    logger.info(f"User {follower_id} followed {followee_id}")
    db.refresh(follow)
    return follow

def unfollow_user(db: Session, follower_id: str, followee_id: str) -> None:
    """Stop following a user, decrementing both users' counters"""
    follow = get_follow(db, follower_id, followee_id)
    if not follow:
        raise NotFoundError("Not following this user")

    db.delete(follow)
    db.flush()
    _adjust_counter(db, follower_id, User.following_count, -1)
    _adjust_counter(db, followee_id, User.followers_count, -1)
    db.commit()
    logger.info(f"User {follower_id} unfollowed {followee_id}")
