"""OTP engine — issues codes and decides validation outcomes."""

from __future__ import annotations

import logging
import random
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from passwordless_auth.config import Settings, settings as default_settings
from passwordless_auth.models.otp import (
    AttemptsExhausted,
    Expired,
    NoRecord,
    OtpRecord,
    Success,
    ValidationOutcome,
    WrongCode,
)
from passwordless_auth.otp.store import OtpStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class OtpEngine:
    """Generates and validates one-time passcodes on top of an ``OtpStore``.

    Parameters
    ----------
    store:
        Backing store; a fresh in-memory one is created when omitted.
    clock:
        Returns the current time.  Tests inject a fake to simulate expiry.
    rng:
        Source of randomness for codes.  Defaults to ``secrets.SystemRandom``.
    """

    def __init__(
        self,
        store: OtpStore | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._store = store if store is not None else OtpStore()
        self._clock = clock
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self._settings = settings or default_settings

    @property
    def store(self) -> OtpStore:
        return self._store

    def generate(self, identity: str) -> str:
        """Issue a new code for *identity*, invalidating any previous one."""
        length = self._settings.otp_length
        code = str(self._rng.randint(10 ** (length - 1), 10**length - 1))
        now = self._clock()
        record = OtpRecord(
            code=code,
            issued_at=now,
            expires_at=now + timedelta(seconds=self._settings.otp_ttl_seconds),
            attempts_remaining=self._settings.otp_max_attempts,
        )
        self._store.put(identity, record)
        logger.info(
            "OTP generated for %s, expires in %d seconds",
            identity,
            self._settings.otp_ttl_seconds,
        )
        return code

    def validate(self, identity: str, input_code: str) -> ValidationOutcome:
        """Check *input_code* against the live record for *identity*.

        Checks run in a fixed order: existence, expiry, exhausted attempts,
        then the code itself.  The wrong guess that uses up the last
        attempt reports ``WrongCode(0)``; only later calls against that
        record report ``AttemptsExhausted``.
        """
        outcome = self._store.update(identity, lambda record: self._check(record, input_code))

        if isinstance(outcome, Success):
            logger.info("OTP validation success for %s", identity)
        elif isinstance(outcome, WrongCode):
            logger.info(
                "OTP validation failed for %s: wrong code, %d attempt(s) remaining",
                identity,
                outcome.attempts_remaining,
            )
        else:
            logger.debug("OTP validation failed for %s: %s", identity, outcome.reason)
        return outcome

    def _check(
        self, record: OtpRecord | None, input_code: str
    ) -> tuple[OtpRecord | None, ValidationOutcome]:
        """Decide the outcome for *record*; runs under the store lock."""
        if record is None:
            return None, NoRecord()
        if record.is_expired(self._clock()):
            return record, Expired()
        if not record.has_attempts_remaining:
            return record, AttemptsExhausted()
        if secrets.compare_digest(record.code.encode(), input_code.encode()):
            return None, Success()
        updated = record.decrement_attempts()
        return updated, WrongCode(updated.attempts_remaining)

    def get_record(self, identity: str) -> OtpRecord | None:
        """Current record for *identity*, for display purposes."""
        return self._store.get(identity)

    def clear_all(self) -> None:
        self._store.clear_all()
        logger.info("All OTP records cleared")
