"""OTP record and the closed set of validation outcomes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import ClassVar


@dataclass(frozen=True)
class OtpRecord:
    """The single live one-time passcode issued to an identity.

    Expiry is a predicate only: an expired record stays in the store until
    it is overwritten by a new code or cleared.
    """

    code: str
    issued_at: datetime
    expires_at: datetime
    attempts_remaining: int = 3

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @property
    def has_attempts_remaining(self) -> bool:
        return self.attempts_remaining > 0

    def decrement_attempts(self) -> OtpRecord:
        """Return a copy with one less attempt."""
        return replace(self, attempts_remaining=self.attempts_remaining - 1)


# ── Validation outcomes ──────────────────────────────────


@dataclass(frozen=True)
class Success:
    reason: ClassVar[str] = "Success"


@dataclass(frozen=True)
class NoRecord:
    reason: ClassVar[str] = "No OTP Found"


@dataclass(frozen=True)
class Expired:
    reason: ClassVar[str] = "OTP Expired"


@dataclass(frozen=True)
class AttemptsExhausted:
    reason: ClassVar[str] = "Attempts Exhausted"


@dataclass(frozen=True)
class WrongCode:
    """Mismatched code; carries the attempts left after this one."""

    attempts_remaining: int
    reason: ClassVar[str] = "Wrong OTP"


ValidationOutcome = Success | NoRecord | Expired | AttemptsExhausted | WrongCode
