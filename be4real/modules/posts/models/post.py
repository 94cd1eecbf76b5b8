from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer, Index
from sqlalchemy.orm import relationship

from be4real.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    img_data = Column(Text, nullable=False)

    owner = relationship("User", back_populates="posts")
    reaction_counts = relationship(
        "PostReactionCount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        # Feed paging walks (created_at, id) in both directions
        Index("ix_posts_created_at_id", "created_at", "id"),
    )

    @property
    def reactions(self):
        """Reaction label -> count; labels with no reactions are absent"""
        return {row.label: row.count for row in self.reaction_counts if row.count > 0}


class PostReactionCount(Base):
    """Aggregate of live reactions per (post, label), maintained by the ledger"""
    __tablename__ = "post_reaction_counts"

    post_id = Column(String, ForeignKey("posts.id"), primary_key=True)
    label = Column(String(50), primary_key=True)
    count = Column(Integer, default=0, nullable=False)
