import os

# Must be set before be4real is imported: the engine is created at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from be4real.core.security import create_access_token, get_password_hash
from be4real.db.base import Base
from be4real.db.session import SessionLocal, engine, get_db
from be4real.main import app
from be4real.modules.posts.models.post import Post, PostReactionCount
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.user_management.models.user import User

# 1x1 transparent PNG
PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
PNG_DATA_URL = f"data:image/png;base64,{PNG_B64}"

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

# bcrypt is slow, hash the shared test password once
_PASSWORD = "password123"
_PASSWORD_HASH = get_password_hash(_PASSWORD)


def ts(seconds: int) -> datetime:
    return EPOCH + timedelta(seconds=seconds)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def password():
    return _PASSWORD


@pytest.fixture
def make_user(db):
    def _make_user(username="alice", verified=True, login_method="password"):
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=f"{username}@example.com",
            hashed_password=_PASSWORD_HASH if login_method == "password" else None,
            login_method=login_method,
            is_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_post(db):
    def _make_post(owner, created_at=None, post_id=None):
        post = Post(
            id=post_id or str(uuid.uuid4()),
            user_id=owner.id,
            img_data=PNG_DATA_URL,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post
    return _make_post


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _auth_headers


@pytest.fixture
def assert_counts_consistent(db):
    """Check the aggregate table against the live reactions of a post"""
    def _check(post_id):
        db.expire_all()
        live = {}
        for reaction in db.query(Reaction).filter(Reaction.post_id == post_id):
            live[reaction.label] = live.get(reaction.label, 0) + 1
        stored = {
            row.label: row.count
            for row in db.query(PostReactionCount).filter(PostReactionCount.post_id == post_id)
        }
        assert stored == live
        return live
    return _check
