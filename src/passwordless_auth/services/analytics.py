"""Analytics sinks — fire-and-forget notifications about the auth flow."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    """Mask an email for privacy: ``j***n@example.com``."""
    if "@" not in email:
        return email[:1] + "***"
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked_local = local[:1] + "***"
    else:
        masked_local = local[0] + "***" + local[-1]
    return f"{masked_local}@{domain}"


class AnalyticsSink(ABC):
    """Receives notifications from the state machine.

    Sinks are pure side effects: their return values are ignored and any
    exception they raise is logged and dropped by the caller.
    """

    @abstractmethod
    def otp_generated(self, email: str) -> None:
        """A new code was issued for *email*."""

    @abstractmethod
    def otp_validation_succeeded(self, email: str) -> None:
        """*email* entered the correct code."""

    @abstractmethod
    def otp_validation_failed(
        self, email: str, reason: str, attempts_remaining: int | None = None
    ) -> None:
        """Validation failed for *email*.

        Parameters
        ----------
        reason:
            Short failure label, e.g. ``"Wrong OTP"``.
        attempts_remaining:
            Attempts left after a wrong guess; ``None`` for other failures.
        """

    @abstractmethod
    def session_started(self, email: str) -> None:
        """*email* reached the session screen."""

    @abstractmethod
    def logged_out(self, email: str, session_duration_seconds: int) -> None:
        """*email* logged out after *session_duration_seconds*."""


class LoggingAnalytics(AnalyticsSink):
    """Writes analytics events to the application log with masked emails."""

    def otp_generated(self, email: str) -> None:
        logger.info("Analytics: OTP generated for %s", mask_email(email))

    def otp_validation_succeeded(self, email: str) -> None:
        logger.info("Analytics: OTP validation success for %s", mask_email(email))

    def otp_validation_failed(
        self, email: str, reason: str, attempts_remaining: int | None = None
    ) -> None:
        if attempts_remaining is None:
            logger.warning(
                "Analytics: OTP validation failure for %s - reason: %s",
                mask_email(email),
                reason,
            )
        else:
            logger.warning(
                "Analytics: OTP validation failure for %s - reason: %s, attempts remaining: %d",
                mask_email(email),
                reason,
                attempts_remaining,
            )

    def session_started(self, email: str) -> None:
        logger.info("Analytics: session started for %s", mask_email(email))

    def logged_out(self, email: str, session_duration_seconds: int) -> None:
        logger.info(
            "Analytics: logout for %s, session duration %ds",
            mask_email(email),
            session_duration_seconds,
        )
