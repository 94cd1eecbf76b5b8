"""
Rebuild reaction aggregates from the reactions table.

The ledger keeps ``post_reaction_counts`` and ``users.reactions_received`` in
step with the reactions table inside one transaction, so this only finds work
after manual edits or a failure outside the ledger.
"""
from typing import Dict, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from be4real.modules.posts.models.post import Post, PostReactionCount
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.posts.reactions.schemas.reaction import ReconcileReport
from be4real.modules.user_management.models.user import User

logger = logging.getLogger("be4real")

def _actual_counts(db: Session, post_id: str) -> Dict[str, int]:
    rows = (
        db.query(Reaction.label, func.count(Reaction.id))
        .filter(Reaction.post_id == post_id)
        .group_by(Reaction.label)
        .all()
    )
    return {label: count for label, count in rows}

def _stored_counts(db: Session, post_id: str) -> Dict[str, int]:
    rows = (
        db.query(PostReactionCount.label, PostReactionCount.count)
        .filter(PostReactionCount.post_id == post_id)
        .all()
    )
    return {label: count for label, count in rows}

def _rewrite_counts(db: Session, post_id: str, counts: Dict[str, int]) -> None:
    db.query(PostReactionCount).filter(PostReactionCount.post_id == post_id).delete(synchronize_session="fetch")
    for label, count in counts.items():
        db.add(PostReactionCount(post_id=post_id, label=label, count=count))

def reconcile_reaction_counts(db: Session, post_id: Optional[str] = None) -> ReconcileReport:
    """
    Recompute post aggregates (all posts, or a single one) and the
    reactions_received counter of their owners. Commits once at the end.
    """
    report = ReconcileReport()

    post_query = db.query(Post.id, Post.user_id)
    if post_id:
        post_query = post_query.filter(Post.id == post_id)
    posts = post_query.all()

    owner_ids = set()
    for pid, owner_id in posts:
        report.posts_checked += 1
        owner_ids.add(owner_id)

        actual = _actual_counts(db, pid)
        if actual != _stored_counts(db, pid):
            logger.warning(f"Reaction counts drifted on post {pid}, rewriting: {actual}")
            _rewrite_counts(db, pid, actual)
            report.posts_fixed += 1

    for owner_id in owner_ids:
        received = (
            db.query(func.count(Reaction.id))
            .join(Post, Post.id == Reaction.post_id)
            .filter(Post.user_id == owner_id)
            .scalar()
        ) or 0
        owner = db.query(User).filter(User.id == owner_id).first()
        if owner and owner.reactions_received != received:
            logger.warning(
                f"reactions_received drifted for user {owner_id}: {owner.reactions_received} -> {received}"
            )
            owner.reactions_received = received
            report.users_fixed += 1

    db.commit()
    logger.info(
        f"Reconciled {report.posts_checked} posts: "
        f"{report.posts_fixed} posts and {report.users_fixed} users fixed"
    )
    return report
