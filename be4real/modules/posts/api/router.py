from typing import Any
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from be4real.core.responses import Envelope, success
from be4real.db.session import get_db
from be4real.deps import get_current_active_verified_user
from be4real.modules.user_management.models.user import User
from be4real.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostList
from be4real.modules.posts.services.post import create_post, get_post_or_404, get_user_posts

logger = logging.getLogger("be4real")

router = APIRouter(prefix="")

@router.post("", response_model=Envelope[PostSchema])
def create_new_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    current_user: User = Depends(get_current_active_verified_user),
) -> Any:
    """
    Create a new post from a base64 encoded image.
    """
    post = create_post(db, post_in.img_data, current_user.id)
    return success("Post created", PostSchema.model_validate(post))

@router.get("/user/{user_id}", response_model=Envelope[PostList])
def read_user_posts(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=50),
) -> Any:
    """
    Get posts by user ID, newest first.
    """
    posts = [PostSchema.model_validate(post) for post in get_user_posts(db, user_id, skip, limit)]
    return success("Posts retrieved", PostList(count=len(posts), posts=posts))

@router.get("/{post_id}", response_model=Envelope[PostSchema])
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
) -> Any:
    """
    Get post by ID. Posts are public.
    """
    post = get_post_or_404(db, post_id)
    return success("Post retrieved", PostSchema.model_validate(post))
