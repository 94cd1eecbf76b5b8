"""
Reaction ledger.

A user holds at most one reaction per post. Reacting again with the same
label removes the reaction, reacting with another label replaces it. Each
call runs as one transaction that writes the reaction row, the post's
per-label counter and the post owner's ``reactions_received`` counter.

The (post_id, user_id) unique constraint settles concurrent first reactions:
the losing insert is rolled back and the whole call is replayed against the
now-existing row.
"""
from typing import Dict, List, Optional, Tuple
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from be4real.core.config import settings
from be4real.core.errors import ConflictError, InternalError, InvalidInputError
from be4real.modules.posts.models.post import Post, PostReactionCount
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.posts.reactions.schemas.reaction import (
    Reaction as ReactionSchema, ReactionOutcome, ReactionResult
)
from be4real.modules.posts.services.post import get_post_or_404
from be4real.modules.user_management.models.user import User

logger = logging.getLogger("be4real")

def get_reaction(db: Session, user_id: str, post_id: str, for_update: bool = False) -> Optional[Reaction]:
    """Get reaction by user ID and post ID"""
    query = db.query(Reaction).filter(Reaction.user_id == user_id, Reaction.post_id == post_id)
    if for_update:
        query = query.with_for_update()
    return query.first()

def get_reactions_by_post(db: Session, post_id: str, skip: int = 0, limit: int = 100) -> List[Reaction]:
    """Get reactions by post ID, newest first"""
    return (
        db.query(Reaction)
        .filter(Reaction.post_id == post_id)
        .order_by(Reaction.created_at.desc(), Reaction.id)
        .offset(skip)
        .limit(limit)
        .all()
    )

def get_reaction_counts(db: Session, post_id: str) -> Dict[str, int]:
    """Get the post's aggregate: label -> count"""
    rows = (
        db.query(PostReactionCount.label, PostReactionCount.count)
        .filter(PostReactionCount.post_id == post_id, PostReactionCount.count > 0)
        .all()
    )
    return {label: count for label, count in rows}

def validate_label(label: str) -> str:
    if not isinstance(label, str) or not 1 <= len(label) <= settings.REACTION_MAX_LENGTH:
        raise InvalidInputError(
            f"Reaction must be between 1 and {settings.REACTION_MAX_LENGTH} characters"
        )
    return label

# Counter primitives. Each is a single UPDATE so concurrent writers never lose
# an increment on the same row.

def _increment_label(db: Session, post_id: str, label: str) -> None:
    updated = (
        db.query(PostReactionCount)
        .filter(PostReactionCount.post_id == post_id, PostReactionCount.label == label)
        .update({PostReactionCount.count: PostReactionCount.count + 1}, synchronize_session=False)
    )
    if not updated:
        # First reaction with this label; a concurrent insert surfaces as IntegrityError
        db.add(PostReactionCount(post_id=post_id, label=label, count=1))
        db.flush()

def _decrement_label(db: Session, post_id: str, label: str) -> None:
    label_filter = (PostReactionCount.post_id == post_id, PostReactionCount.label == label)
    (
        db.query(PostReactionCount)
        .filter(*label_filter, PostReactionCount.count > 0)
        .update({PostReactionCount.count: PostReactionCount.count - 1}, synchronize_session=False)
    )
    # Labels disappear from the aggregate once nobody uses them
    (
        db.query(PostReactionCount)
        .filter(*label_filter, PostReactionCount.count <= 0)
        .delete(synchronize_session="fetch")
    )

def _adjust_reactions_received(db: Session, user_id: str, delta: int) -> None:
    query = db.query(User).filter(User.id == user_id)
    if delta < 0:
        query = query.filter(User.reactions_received >= -delta)
    query.update({User.reactions_received: User.reactions_received + delta}, synchronize_session=False)

def _transition(
    db: Session, post: Post, user_id: str, label: str
) -> Tuple[ReactionOutcome, Optional[Reaction]]:
    """Apply one state transition for (post, user) without committing"""
    existing = get_reaction(db, user_id, post.id, for_update=True)

    if existing is None:
        reaction = Reaction(
            id=str(uuid.uuid4()),
            post_id=post.id,
            user_id=user_id,
            label=label,
            created_at=datetime.now(timezone.utc),
        )
        db.add(reaction)
        db.flush()
        _increment_label(db, post.id, label)
        _adjust_reactions_received(db, post.user_id, 1)
        return ReactionOutcome.ADDED, reaction

    if existing.label == label:
        db.delete(existing)
        db.flush()
        _decrement_label(db, post.id, label)
        _adjust_reactions_received(db, post.user_id, -1)
        return ReactionOutcome.REMOVED, None

    previous = existing.label
    existing.label = label
    existing.created_at = datetime.now(timezone.utc)
    db.flush()
    _decrement_label(db, post.id, previous)
    _increment_label(db, post.id, label)
    return ReactionOutcome.UPDATED, existing

def apply_reaction(db: Session, post_id: str, user_id: str, label: str) -> ReactionResult:
    """
    Toggle or switch the user's reaction on a post.

    - no reaction yet: add it ("added")
    - same label again: remove it ("removed")
    - different label: replace it ("updated")

    Raises InvalidInputError for a bad label, NotFoundError for an unknown post,
    ConflictError when concurrent writers keep winning the race, and
    InternalError when the store fails.
    """
    validate_label(label)

    attempts = max(1, settings.REACTION_WRITE_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        post = get_post_or_404(db, post_id)
        try:
            outcome, reaction = _transition(db, post, user_id, label)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Reaction race on post {post_id} by user {user_id} (attempt {attempt}/{attempts})"
            )
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to apply reaction on post {post_id}")
            raise InternalError("Internal server error") from e

        logger.info(f"Reaction {outcome.value} on post {post_id} by user {user_id}: {label}")
        return ReactionResult(
            result=outcome,
            reaction=ReactionSchema.model_validate(reaction) if reaction is not None else None,
            reactions=get_reaction_counts(db, post_id),
        )

    raise ConflictError("Reaction is being updated concurrently, please retry")
