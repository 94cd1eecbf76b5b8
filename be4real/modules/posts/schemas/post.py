from typing import Dict, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class PostCreate(BaseModel):
    # base64 image, optionally as a data URL ("data:image/png;base64,...")
    img_data: str = Field(..., min_length=1)

class Post(BaseModel):
    """Post model returned to client"""
    id: str
    user_id: str
    img_data: str
    created_at: datetime
    reactions: Dict[str, int] = {}

    model_config = ConfigDict(from_attributes=True)

class PostList(BaseModel):
    count: int
    posts: List[Post]
