"""Tests for the OtpStore."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from passwordless_auth.models.otp import OtpRecord
from passwordless_auth.otp.store import OtpStore

_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _record(code: str = "123456", attempts: int = 3) -> OtpRecord:
    return OtpRecord(
        code=code,
        issued_at=_NOW,
        expires_at=_NOW + timedelta(seconds=60),
        attempts_remaining=attempts,
    )


@pytest.fixture
def store():
    return OtpStore()


def test_get_unknown_identity(store):
    assert store.get("nobody@example.com") is None
    assert "nobody@example.com" not in store


def test_put_then_get(store):
    record = _record()
    store.put("alice@example.com", record)
    assert store.get("alice@example.com") == record
    assert len(store) == 1


def test_put_overwrites_existing_record(store):
    store.put("alice@example.com", _record("111111"))
    store.put("alice@example.com", _record("222222"))

    assert store.get("alice@example.com").code == "222222"
    assert len(store) == 1


def test_remove(store):
    store.put("alice@example.com", _record())
    store.remove("alice@example.com")
    assert store.get("alice@example.com") is None
    # Removing again is harmless
    store.remove("alice@example.com")


def test_clear_all(store):
    store.put("alice@example.com", _record())
    store.put("bob@example.com", _record())

    store.clear_all()

    assert store.get("alice@example.com") is None
    assert store.get("bob@example.com") is None
    assert len(store) == 0


def test_store_does_not_inspect_expiry_or_attempts(store):
    stale = OtpRecord(
        code="123456",
        issued_at=_NOW - timedelta(hours=1),
        expires_at=_NOW - timedelta(minutes=59),
        attempts_remaining=0,
    )
    store.put("alice@example.com", stale)
    assert store.get("alice@example.com") == stale


def test_injected_lock_guards_access():
    lock = MagicMock()
    store = OtpStore(lock=lock)

    store.put("alice@example.com", _record())
    store.get("alice@example.com")
    store.remove("alice@example.com")

    assert lock.__enter__.call_count == 3
    assert lock.__exit__.call_count == 3


def test_update_replaces_and_returns_result(store):
    store.put("alice@example.com", _record(attempts=3))

    result = store.update(
        "alice@example.com",
        lambda record: (record.decrement_attempts(), record.attempts_remaining),
    )

    assert result == 3
    assert store.get("alice@example.com").attempts_remaining == 2


def test_update_returning_none_deletes(store):
    store.put("alice@example.com", _record())

    assert store.update("alice@example.com", lambda record: (None, "gone")) == "gone"
    assert "alice@example.com" not in store


def test_update_holds_lock_for_read_and_write():
    lock = MagicMock()
    store = OtpStore(lock=lock)

    store.update("alice@example.com", lambda record: (_record(), None))

    assert lock.__enter__.call_count == 1
    assert store.get("alice@example.com") == _record()
