from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from be4real.core.errors import NotFoundError
from be4real.core.responses import Envelope, success
from be4real.db.session import get_db
from be4real.deps import get_current_active_verified_user
from be4real.modules.user_management.models.user import User
from be4real.modules.posts.services.post import get_post_or_404
from be4real.modules.posts.reactions.schemas.reaction import (
    Reaction as ReactionSchema, ReactionCreate, ReactionList, ReactionResult
)
from be4real.modules.posts.reactions.services.reaction import (
    apply_reaction, get_reaction, get_reaction_counts, get_reactions_by_post
)

router = APIRouter()

_MESSAGES = {
    "added": "Reaction added",
    "removed": "Reaction removed",
    "updated": "Reaction updated",
}

@router.post("", response_model=Envelope[ReactionResult])
def react_to_post(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to react to"),
    reaction_in: ReactionCreate,
    current_user: User = Depends(get_current_active_verified_user),
) -> Any:
    """
    React to a post. Sending the current reaction again removes it,
    sending a different one replaces it.
    """
    result = apply_reaction(db, post_id, current_user.id, reaction_in.reaction)
    return success(_MESSAGES[result.result.value], result)

@router.get("", response_model=Envelope[ReactionList])
def read_reactions_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to get reactions for"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
) -> Any:
    """Get reactions by post ID"""
    get_post_or_404(db, post_id)
    reactions = [
        ReactionSchema.model_validate(reaction)
        for reaction in get_reactions_by_post(db, post_id=post_id, skip=skip, limit=limit)
    ]
    return success("Reactions retrieved", ReactionList(count=len(reactions), reactions=reactions))

@router.get("/counts", response_model=Envelope[Dict[str, int]])
def read_reaction_counts_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to get reaction counts for"),
) -> Any:
    """Get reaction counts by label for a post"""
    get_post_or_404(db, post_id)
    return success("Reaction counts retrieved", get_reaction_counts(db, post_id))

@router.get("/me", response_model=Envelope[ReactionSchema])
def read_my_reaction(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    current_user: User = Depends(get_current_active_verified_user),
) -> Any:
    """Get the current user's reaction on a post"""
    get_post_or_404(db, post_id)
    reaction = get_reaction(db, current_user.id, post_id)
    if not reaction:
        raise NotFoundError("Reaction not found")
    return success("Reaction retrieved", ReactionSchema.model_validate(reaction))
