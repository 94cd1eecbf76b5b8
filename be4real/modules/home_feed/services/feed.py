"""
Cursor paging over the global feed.

Posts are ordered by (created_at, id), newest first. A page is taken either
from the top of the feed or relative to a pivot post: ``before`` walks to
older posts, ``after`` collects posts newer than the pivot (used to poll for
new posts). The id breaks ties between posts created at the same instant, so
consecutive pages never repeat or skip a post.
"""
from typing import Dict, List, Optional
import logging
import uuid

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from be4real.core.config import settings
from be4real.core.errors import InvalidInputError, NotFoundError
from be4real.modules.home_feed.schemas.feed import FeedItem, FeedResponse
from be4real.modules.posts.models.post import Post
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.posts.schemas.post import Post as PostSchema
from be4real.modules.user_management.schemas.user import UserSummary

logger = logging.getLogger("be4real")

def resolve_limit(limit: Optional[int]) -> int:
    """Apply the default, reject non-positive values and clamp to the maximum"""
    if limit is None:
        return settings.FEED_DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInputError("Invalid limit")
    if limit < 1:
        raise InvalidInputError("Invalid limit")
    return min(limit, settings.FEED_MAX_LIMIT)

def _get_pivot(db: Session, pivot_id: str, name: str) -> Post:
    try:
        uuid.UUID(pivot_id)
    except ValueError:
        raise InvalidInputError(f"Invalid '{name}' post ID")

    pivot = db.query(Post).filter(Post.id == pivot_id).first()
    if not pivot:
        raise NotFoundError("Pivot post not found")
    return pivot

def _older_than(pivot: Post):
    return or_(
        Post.created_at < pivot.created_at,
        and_(Post.created_at == pivot.created_at, Post.id < pivot.id),
    )

def _newer_than(pivot: Post):
    return or_(
        Post.created_at > pivot.created_at,
        and_(Post.created_at == pivot.created_at, Post.id > pivot.id),
    )

def get_page(
    db: Session,
    before: Optional[str] = None,
    after: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Post]:
    """
    Return up to ``limit`` posts, newest first.

    - no pivot: the most recent posts
    - ``before``: posts older than the pivot
    - ``after``: posts newer than the pivot (still newest first)

    Raises InvalidInputError for a bad limit, a malformed pivot id or when both
    pivots are given, and NotFoundError when the pivot post does not exist.
    """
    if before and after:
        raise InvalidInputError("Cannot use both 'before' and 'after' params")
    page_size = resolve_limit(limit)

    query = db.query(Post).options(selectinload(Post.owner))
    if before:
        query = query.filter(_older_than(_get_pivot(db, before, "before")))
    elif after:
        query = query.filter(_newer_than(_get_pivot(db, after, "after")))

    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .limit(page_size)
        .all()
    )
    logger.debug(f"Feed page before={before} after={after} limit={page_size}: {len(posts)} posts")
    return posts

def _get_user_reactions(db: Session, user_id: str, post_ids: List[str]) -> Dict[str, str]:
    """Map post id -> the user's label, for the given posts"""
    if not post_ids:
        return {}
    rows = (
        db.query(Reaction.post_id, Reaction.label)
        .filter(Reaction.user_id == user_id, Reaction.post_id.in_(post_ids))
        .all()
    )
    return {post_id: label for post_id, label in rows}

def get_feed(
    db: Session,
    before: Optional[str] = None,
    after: Optional[str] = None,
    limit: Optional[int] = None,
    viewer_id: Optional[str] = None,
) -> FeedResponse:
    """Build the feed response: one page of posts with their authors"""
    posts = get_page(db, before=before, after=after, limit=limit)

    my_reactions = {}
    if viewer_id:
        my_reactions = _get_user_reactions(db, viewer_id, [post.id for post in posts])

    items = [
        FeedItem(
            post=PostSchema.model_validate(post),
            author=UserSummary.model_validate(post.owner),
            my_reaction=my_reactions.get(post.id),
        )
        for post in posts
    ]
    return FeedResponse(count=len(items), posts=items)
