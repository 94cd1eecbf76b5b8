from typing import List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr

class UserPublic(BaseModel):
    """Public profile returned for any user"""
    id: str
    username: str
    created_at: datetime
    post_ids: List[str] = []
    followers_count: int = 0
    following_count: int = 0
    reactions_received: int = 0

    model_config = ConfigDict(from_attributes=True)

class UserMe(UserPublic):
    """Profile of the authenticated user"""
    email: EmailStr
    login_method: str
    is_verified: bool

class UserSummary(BaseModel):
    """Author block embedded in feed items"""
    id: str
    username: str

    model_config = ConfigDict(from_attributes=True)
