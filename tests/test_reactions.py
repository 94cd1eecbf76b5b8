import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from be4real.core.errors import ConflictError, InternalError, InvalidInputError, NotFoundError
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.posts.reactions.schemas.reaction import ReactionOutcome
from be4real.modules.posts.reactions.services import reaction as ledger
from be4real.modules.posts.reactions.services.reaction import (
    apply_reaction, get_reaction, get_reaction_counts
)
from be4real.modules.user_management.models.user import User

FIRE = "🔥"
HEART = "❤️"


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def reactor(make_user):
    return make_user("reactor")


@pytest.fixture
def post(owner, make_post):
    return make_post(owner)


def _reactions_received(db, user):
    db.expire_all()
    return db.query(User).filter(User.id == user.id).one().reactions_received


def _live_reactions(db, post, user):
    return db.query(Reaction).filter(Reaction.post_id == post.id, Reaction.user_id == user.id).all()


def test_first_reaction_is_added(db, post, owner, reactor, assert_counts_consistent):
    result = apply_reaction(db, post.id, reactor.id, FIRE)

    assert result.result == ReactionOutcome.ADDED
    assert result.reaction.label == FIRE
    assert result.reactions == {FIRE: 1}
    assert _reactions_received(db, owner) == 1
    assert _reactions_received(db, reactor) == 0
    assert assert_counts_consistent(post.id) == {FIRE: 1}


def test_same_label_again_removes_reaction(db, post, owner, reactor, assert_counts_consistent):
    apply_reaction(db, post.id, reactor.id, FIRE)
    result = apply_reaction(db, post.id, reactor.id, FIRE)

    assert result.result == ReactionOutcome.REMOVED
    assert result.reaction is None
    assert result.reactions == {}
    assert get_reaction(db, reactor.id, post.id) is None
    assert _reactions_received(db, owner) == 0
    assert assert_counts_consistent(post.id) == {}


def test_toggle_twice_restores_count_from_other_users(db, post, reactor, make_user):
    other = make_user("other")
    apply_reaction(db, post.id, other.id, FIRE)
    before = get_reaction_counts(db, post.id)[FIRE]

    apply_reaction(db, post.id, reactor.id, FIRE)
    assert get_reaction_counts(db, post.id)[FIRE] == before + 1
    apply_reaction(db, post.id, reactor.id, FIRE)

    assert get_reaction_counts(db, post.id)[FIRE] == before
    assert get_reaction(db, reactor.id, post.id) is None


def test_different_label_updates_in_place(db, post, owner, reactor, make_user, assert_counts_consistent):
    other = make_user("other")
    apply_reaction(db, post.id, other.id, FIRE)
    first = apply_reaction(db, post.id, reactor.id, FIRE)

    result = apply_reaction(db, post.id, reactor.id, HEART)

    assert result.result == ReactionOutcome.UPDATED
    assert result.reaction.id == first.reaction.id
    assert result.reaction.label == HEART
    assert result.reaction.created_at >= first.reaction.created_at
    assert result.reactions == {FIRE: 1, HEART: 1}
    rows = _live_reactions(db, post, reactor)
    assert len(rows) == 1 and rows[0].label == HEART
    # Still one reaction from this user
    assert _reactions_received(db, owner) == 2
    assert_counts_consistent(post.id)


def test_switching_away_from_only_label_drops_it(db, post, reactor):
    apply_reaction(db, post.id, reactor.id, FIRE)
    result = apply_reaction(db, post.id, reactor.id, HEART)
    assert result.reactions == {HEART: 1}


def test_state_machine_round_trip(db, post, owner, reactor, assert_counts_consistent):
    outcomes = [
        apply_reaction(db, post.id, reactor.id, label).result
        for label in (FIRE, HEART, HEART, FIRE)
    ]
    assert outcomes == [
        ReactionOutcome.ADDED,
        ReactionOutcome.UPDATED,
        ReactionOutcome.REMOVED,
        ReactionOutcome.ADDED,
    ]
    assert len(_live_reactions(db, post, reactor)) == 1
    assert _reactions_received(db, owner) == 1
    assert assert_counts_consistent(post.id) == {FIRE: 1}


@pytest.mark.parametrize("label", ["", "x" * 51])
def test_label_length_validated_before_store_access(label):
    session = MagicMock()
    with pytest.raises(InvalidInputError):
        apply_reaction(session, str(uuid.uuid4()), str(uuid.uuid4()), label)
    session.query.assert_not_called()


def test_fifty_character_label_accepted(db, post, reactor):
    result = apply_reaction(db, post.id, reactor.id, "x" * 50)
    assert result.result == ReactionOutcome.ADDED


def test_unknown_post_is_not_found(db, reactor):
    with pytest.raises(NotFoundError):
        apply_reaction(db, str(uuid.uuid4()), reactor.id, FIRE)


def _stale_lookup(monkeypatch, times):
    """Make the first ``times`` lookups miss, as if another request inserted concurrently"""
    real = ledger.get_reaction
    calls = {"count": 0}

    def lookup(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] <= times:
            return None
        return real(*args, **kwargs)

    monkeypatch.setattr(ledger, "get_reaction", lookup)
    return calls


def test_create_race_retries_as_toggle(db, post, owner, reactor, monkeypatch, assert_counts_consistent):
    apply_reaction(db, post.id, reactor.id, FIRE)
    calls = _stale_lookup(monkeypatch, times=1)

    result = apply_reaction(db, post.id, reactor.id, FIRE)

    assert calls["count"] == 2
    assert result.result == ReactionOutcome.REMOVED
    assert _live_reactions(db, post, reactor) == []
    assert _reactions_received(db, owner) == 0
    assert assert_counts_consistent(post.id) == {}


def test_create_race_retries_as_update(db, post, owner, reactor, monkeypatch, assert_counts_consistent):
    apply_reaction(db, post.id, reactor.id, FIRE)
    _stale_lookup(monkeypatch, times=1)

    result = apply_reaction(db, post.id, reactor.id, HEART)

    assert result.result == ReactionOutcome.UPDATED
    assert [r.label for r in _live_reactions(db, post, reactor)] == [HEART]
    assert _reactions_received(db, owner) == 1
    assert assert_counts_consistent(post.id) == {HEART: 1}


def test_persistent_race_reports_conflict(db, post, owner, reactor, monkeypatch, assert_counts_consistent):
    apply_reaction(db, post.id, reactor.id, FIRE)
    _stale_lookup(monkeypatch, times=100)

    with pytest.raises(ConflictError):
        apply_reaction(db, post.id, reactor.id, HEART)

    assert [r.label for r in _live_reactions(db, post, reactor)] == [FIRE]
    assert _reactions_received(db, owner) == 1
    assert assert_counts_consistent(post.id) == {FIRE: 1}


def test_store_failure_is_internal_and_rolled_back(db, post, owner, reactor, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("UPDATE post_reaction_counts", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ledger, "_increment_label", broken)

    with pytest.raises(InternalError):
        apply_reaction(db, post.id, reactor.id, FIRE)

    assert _live_reactions(db, post, reactor) == []
    assert _reactions_received(db, owner) == 0


def test_react_endpoint(client, post, reactor, auth_headers):
    url = f"/api/posts/{post.id}/reactions"

    response = client.post(url, json={"reaction": FIRE}, headers=auth_headers(reactor))
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "Reaction added"
    assert body["data"]["result"] == "added"
    assert body["data"]["reactions"] == {FIRE: 1}

    response = client.post(url, json={"reaction": HEART}, headers=auth_headers(reactor))
    assert response.json()["data"]["result"] == "updated"

    response = client.get(f"{url}/me", headers=auth_headers(reactor))
    assert response.json()["data"]["label"] == HEART

    response = client.get(f"{url}/counts")
    assert response.json()["data"] == {HEART: 1}

    response = client.get(url)
    assert response.json()["data"]["count"] == 1

    response = client.post(url, json={"reaction": HEART}, headers=auth_headers(reactor))
    assert response.json()["data"]["result"] == "removed"
    assert response.json()["data"]["reaction"] is None

    response = client.get(f"{url}/me", headers=auth_headers(reactor))
    assert response.status_code == 404


def test_react_endpoint_requires_credential(client, post):
    response = client.post(f"/api/posts/{post.id}/reactions", json={"reaction": FIRE})
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthenticated"


def test_react_endpoint_requires_verified_user(client, post, make_user, auth_headers):
    pending = make_user("pending", verified=False)
    response = client.post(
        f"/api/posts/{post.id}/reactions", json={"reaction": FIRE}, headers=auth_headers(pending)
    )
    assert response.status_code == 403


def test_react_endpoint_errors(client, post, reactor, auth_headers):
    response = client.post(
        f"/api/posts/{uuid.uuid4()}/reactions", json={"reaction": FIRE}, headers=auth_headers(reactor)
    )
    assert response.status_code == 404

    response = client.post(
        f"/api/posts/{post.id}/reactions", json={"reaction": ""}, headers=auth_headers(reactor)
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"
