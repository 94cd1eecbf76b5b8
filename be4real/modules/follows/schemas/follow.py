from pydantic import BaseModel

class FollowStatus(BaseModel):
    """Follow state between the caller and another user"""
    user_id: str
    following: bool
    followers_count: int
    following_count: int
