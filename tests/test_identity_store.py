"""Unit tests for the identity store (users and IP registrations)."""

import threading
from datetime import datetime, timezone

import pytest

from app.core.errors import AlreadyRegisteredAppError
from app.services.identity_store import IdentityStore

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def store() -> IdentityStore:
    return IdentityStore(clock=lambda: FIXED_NOW)


def test_register_issues_token_with_initial_credits(store: IdentityStore) -> None:
    result = store.register("10.0.0.1")

    assert result.requests_number == 10
    user = store.lookup(result.token)
    assert user is not None
    assert user.token == result.token
    assert user.user_id != result.token
    assert user.requests_number == 10
    assert user.last_recharge == FIXED_NOW
    assert user.ip == "10.0.0.1"
    assert store.token_for_ip("10.0.0.1") == result.token


def test_register_rejects_ip_with_funded_token(store: IdentityStore) -> None:
    store.register("10.0.0.1")

    with pytest.raises(AlreadyRegisteredAppError) as exc_info:
        store.register("10.0.0.1")

    assert exc_info.value.code == "already_registered"
    assert exc_info.value.http_status == 403
    assert len(store) == 1


def test_register_after_exhaustion_overwrites_ip_mapping(store: IdentityStore) -> None:
    first = store.register("10.0.0.1")
    store.lookup(first.token).requests_number = 0

    second = store.register("10.0.0.1")

    assert second.token != first.token
    assert store.token_for_ip("10.0.0.1") == second.token
    # The exhausted user is kept, never deleted
    assert store.lookup(first.token) is not None
    assert len(store) == 2


def test_different_ips_register_independently(store: IdentityStore) -> None:
    a = store.register("10.0.0.1")
    b = store.register("10.0.0.2")

    assert a.token != b.token
    assert len(store) == 2


def test_lookup_unknown_or_empty_token(store: IdentityStore) -> None:
    assert store.lookup("nope") is None
    assert store.lookup("") is None
    assert store.lookup(None) is None


def test_is_funded(store: IdentityStore) -> None:
    token = store.register("10.0.0.1").token
    assert store.is_funded(token) is True

    store.lookup(token).requests_number = 0
    assert store.is_funded(token) is False
    assert store.is_funded("unknown") is False
    assert store.is_funded(None) is False


def test_token_factory_collisions_are_retried() -> None:
    ids = iter(["dup", "u1", "dup", "dup", "fresh", "u2"])
    store = IdentityStore(token_factory=lambda: next(ids))

    first = store.register("10.0.0.1")
    second = store.register("10.0.0.2")

    assert first.token == "dup"
    assert second.token == "fresh"


def test_initial_credits_must_be_positive() -> None:
    with pytest.raises(ValueError):
        IdentityStore(initial_credits=0)


def test_concurrent_registrations_from_same_ip_issue_one_token(store: IdentityStore) -> None:
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def _worker() -> None:
        barrier.wait()
        try:
            store.register("10.0.0.9")
            outcome = "ok"
        except AlreadyRegisteredAppError:
            outcome = "rejected"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("rejected") == 7
