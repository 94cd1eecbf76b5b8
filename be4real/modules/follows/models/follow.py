from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint

from be4real.db.session import Base


class Follow(Base):
    __tablename__ = "follows"

    follower_id = Column(String, ForeignKey("users.id"), primary_key=True)
    followee_id = Column(String, ForeignKey("users.id"), primary_key=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("follower_id", "followee_id", name="unique_follow"),
        CheckConstraint("follower_id != followee_id", name="no_self_follow"),
    )
