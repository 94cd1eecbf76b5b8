from typing import Any
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from be4real.core.responses import Envelope, success
from be4real.db.session import get_db
from be4real.deps import get_current_user, get_current_active_verified_user
from be4real.modules.follows.schemas.follow import FollowStatus
from be4real.modules.follows.services.follow import follow_user, unfollow_user
from be4real.modules.user_management.models.user import User
from be4real.modules.user_management.schemas.user import UserMe, UserPublic
from be4real.modules.user_management.services.user import get_user, resolve_user

router = APIRouter()
logger = logging.getLogger("be4real")

def _follow_status(db: Session, user_id: str, following: bool) -> FollowStatus:
    user = get_user(db, user_id)
    return FollowStatus(
        user_id=user.id,
        following=following,
        followers_count=user.followers_count,
        following_count=user.following_count,
    )

@router.get("/me", response_model=Envelope[UserMe])
def read_user_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return success("User retrieved", UserMe.model_validate(current_user))

@router.get("/{identifier}", response_model=Envelope[UserPublic])
def read_user(
    identifier: str,
    db: Session = Depends(get_db),
) -> Any:
    """Get a user by user ID, post ID or username (public fields only)"""
    user = resolve_user(db, identifier)
    return success("User retrieved", UserPublic.model_validate(user))

@router.post("/{user_id}/follow", response_model=Envelope[FollowStatus])
def follow(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_active_verified_user),
) -> Any:
    """Follow a user"""
    follow_user(db, current_user.id, user_id)
    return success("User followed", _follow_status(db, user_id, True))

@router.delete("/{user_id}/follow", response_model=Envelope[FollowStatus])
def unfollow(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_active_verified_user),
) -> Any:
    """Unfollow a user"""
    unfollow_user(db, current_user.id, user_id)
    return success("User unfollowed", _follow_status(db, user_id, False))
