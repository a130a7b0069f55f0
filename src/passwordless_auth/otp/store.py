"""In-memory OTP store — one live record per identity."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import TypeVar

from passwordless_auth.models.otp import OtpRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OtpStore:
    """Thread-safe in-memory OTP store.

    Each entry maps ``identity → OtpRecord``.  The store is a plain
    key-value mapping: it never inspects expiry or attempts.  All access
    goes through *lock*, which defaults to a fresh ``threading.Lock``.
    """

    def __init__(self, lock: AbstractContextManager | None = None) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._lock = lock if lock is not None else threading.Lock()

    def put(self, identity: str, record: OtpRecord) -> None:
        """Store *record*, replacing any existing one for *identity*."""
        with self._lock:
            self._records[identity] = record

    def get(self, identity: str) -> OtpRecord | None:
        with self._lock:
            return self._records.get(identity)

    def update(
        self,
        identity: str,
        func: Callable[[OtpRecord | None], tuple[OtpRecord | None, T]],
    ) -> T:
        """Atomically replace the record for *identity*.

        *func* receives the current record (or ``None``) and returns the
        record to store, ``None`` to delete it, plus a result that is
        passed back to the caller.  The lock is held throughout, so no
        ``put`` can land between the read and the write.
        """
        with self._lock:
            new_record, result = func(self._records.get(identity))
            if new_record is None:
                self._records.pop(identity, None)
            else:
                self._records[identity] = new_record
            return result

    def remove(self, identity: str) -> None:
        """Remove the record for *identity* (no-op when absent)."""
        with self._lock:
            self._records.pop(identity, None)

    def clear_all(self) -> None:
        with self._lock:
            count = len(self._records)
            self._records.clear()
        logger.debug("Cleared %d OTP record(s)", count)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
