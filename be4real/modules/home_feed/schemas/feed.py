from typing import List, Optional
from pydantic import BaseModel

from be4real.modules.posts.schemas.post import Post
from be4real.modules.user_management.schemas.user import UserSummary

class FeedItem(BaseModel):
    """Feed item model returned to client"""
    post: Post
    author: UserSummary
    my_reaction: Optional[str] = None

class FeedResponse(BaseModel):
    """Feed response model returned to client"""
    count: int
    posts: List[FeedItem]
