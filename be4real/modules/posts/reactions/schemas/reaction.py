from enum import Enum
from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from be4real.core.config import settings

class ReactionOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UPDATED = "updated"

class ReactionCreate(BaseModel):
    reaction: str = Field(..., min_length=1, max_length=settings.REACTION_MAX_LENGTH)

class Reaction(BaseModel):
    """Reaction model returned to client"""
    id: str
    post_id: str
    user_id: str
    label: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ReactionResult(BaseModel):
    """Outcome of applying a reaction to a post"""
    result: ReactionOutcome
    reaction: Optional[Reaction] = None
    reactions: Dict[str, int] = {}

class ReactionList(BaseModel):
    count: int
    reactions: List[Reaction]

class ReconcileReport(BaseModel):
    posts_checked: int = 0
    posts_fixed: int = 0
    users_fixed: int = 0
