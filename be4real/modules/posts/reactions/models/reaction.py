from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from be4real.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(String, primary_key=True, index=True)
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    label = Column(String(50), nullable=False)  # free-form, usually an emoji
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        # One live reaction per user per post
        UniqueConstraint("post_id", "user_id", name="unique_post_reaction"),
    )
