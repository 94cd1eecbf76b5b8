from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from be4real.core.responses import Envelope, success
from be4real.db.session import get_db
from be4real.deps import get_optional_user
from be4real.modules.user_management.models.user import User
from be4real.modules.home_feed.schemas.feed import FeedResponse
from be4real.modules.home_feed.services.feed import get_feed

router = APIRouter()

@router.get("", response_model=Envelope[FeedResponse])
def read_home_feed(
    *,
    db: Session = Depends(get_db),
    before: Optional[str] = Query(None, description="Get posts older than this post ID"),
    after: Optional[str] = Query(None, description="Get posts newer than this post ID"),
    limit: Optional[int] = Query(None, description="Number of posts (default 20, max 50)"),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """
    Get a page of the feed, newest first.

    - Initial load: GET /api/feed?limit=20
    - Load more: GET /api/feed?before=<POST_ID>&limit=20
    - Refresh: GET /api/feed?after=<POST_ID>&limit=20
    """
    feed = get_feed(
        db,
        before=before,
        after=after,
        limit=limit,
        viewer_id=current_user.id if current_user else None,
    )
    return success("Feed retrieved", feed)
