from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, Integer
from sqlalchemy.orm import relationship

from be4real.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    login_method = Column(String, default="password")  # password, google
    username = Column(String(32), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)  # null for federated logins
    is_verified = Column(Boolean, default=False)
    verification_code = Column(String(6), nullable=True)

    # Denormalized counters
    followers_count = Column(Integer, default=0, nullable=False)
    following_count = Column(Integer, default=0, nullable=False)
    reactions_received = Column(Integer, default=0, nullable=False)

    posts = relationship(
        "Post",
        order_by="Post.created_at",
        back_populates="owner",
    )

    @property
    def post_ids(self):
        return [post.id for post in self.posts]
