"""Auth state machine — drives Login → OtpPending → Session.

Every operation and every timer tick runs under one ``asyncio.Lock`` and
publishes a complete new ``AuthState``; callers only ever see whole
snapshots.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, assert_never

from passwordless_auth.config import Settings, settings as default_settings
from passwordless_auth.models.auth_state import AuthScreen, AuthState
from passwordless_auth.models.otp import (
    AttemptsExhausted,
    Expired,
    NoRecord,
    Success,
    WrongCode,
)
from passwordless_auth.otp.engine import OtpEngine, utc_now
from passwordless_auth.services.analytics import AnalyticsSink, LoggingAnalytics
from passwordless_auth.services.timers import PeriodicTimer
from passwordless_auth.validators import filter_otp_digits, is_valid_email

logger = logging.getLogger(__name__)

StateListener = Callable[[AuthState], None]

# ── User-facing messages ─────────────────────────────────
MSG_INVALID_EMAIL = "Please enter a valid email address"
MSG_GENERATE_FAILED = "Failed to generate OTP. Please try again."
MSG_OTP_LENGTH = "Please enter a 6-digit OTP"
MSG_VALIDATE_FAILED = "Failed to validate OTP. Please try again."
MSG_OTP_EXPIRED = "OTP has expired. Please generate a new one."
MSG_MAX_ATTEMPTS_REGENERATE = "Maximum attempts exceeded. Please generate a new OTP."
MSG_MAX_ATTEMPTS = "Maximum attempts exceeded."
MSG_NO_OTP = "No OTP found. Please generate a new one."


def incorrect_otp_message(attempts_remaining: int) -> str:
    return f"Incorrect OTP. {attempts_remaining} attempts remaining."


class AuthStateMachine:
    """Owns the published ``AuthState`` and the two background timers.

    Parameters
    ----------
    engine:
        OTP engine; a fresh one sharing *clock* is created when omitted.
    analytics:
        Notification sink, ``LoggingAnalytics`` by default.
    clock:
        Current-time source for session timing.
    """

    def __init__(
        self,
        engine: OtpEngine | None = None,
        *,
        analytics: AnalyticsSink | None = None,
        clock: Callable[[], datetime] = utc_now,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._clock = clock
        self._engine = engine or OtpEngine(clock=clock, settings=self._settings)
        self._analytics = analytics or LoggingAnalytics()
        self._state = AuthState(otp_attempts_remaining=self._settings.otp_max_attempts)
        self._lock = asyncio.Lock()
        self._listeners: list[StateListener] = []
        self._otp_timer = PeriodicTimer(
            "otp-countdown", self._settings.tick_interval_seconds, self._on_otp_tick
        )
        self._session_timer = PeriodicTimer(
            "session-duration", self._settings.tick_interval_seconds, self._on_session_tick
        )

    # ── Published state ──────────────────────────────────

    @property
    def state(self) -> AuthState:
        """The current snapshot."""
        return self._state

    @property
    def engine(self) -> OtpEngine:
        return self._engine

    @property
    def otp_timer_running(self) -> bool:
        return self._otp_timer.is_running

    @property
    def session_timer_running(self) -> bool:
        return self._session_timer.is_running

    def add_listener(self, listener: StateListener) -> None:
        """Call *listener* with every snapshot published from now on."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Operations ───────────────────────────────────────

    async def submit_email_change(self, text: str) -> None:
        async with self._lock:
            if self._state.screen is not AuthScreen.LOGIN:
                logger.debug("Ignoring email change on %s", self._state.screen.value)
                return
            self._publish(email=text, is_email_valid=is_valid_email(text), error_message=None)

    async def generate_otp(self) -> None:
        """Issue a code for the current email and move to the OTP screen."""
        async with self._lock:
            if self._state.screen is AuthScreen.SESSION:
                logger.debug("Ignoring OTP generation during a session")
                return
            await self._generate_locked()

    async def submit_otp_digits(self, text: str) -> None:
        async with self._lock:
            if self._state.screen is not AuthScreen.OTP_PENDING:
                logger.debug("Ignoring OTP input on %s", self._state.screen.value)
                return
            self._publish(
                otp_input=filter_otp_digits(text, self._settings.otp_length),
                otp_error=None,
            )

    async def validate_otp(self) -> None:
        """Check the buffered code and fold the outcome into the state."""
        async with self._lock:
            current = self._state
            if current.screen is not AuthScreen.OTP_PENDING:
                logger.debug("Ignoring OTP validation on %s", current.screen.value)
                return
            if len(current.otp_input) != self._settings.otp_length:
                self._publish(otp_error=MSG_OTP_LENGTH)
                return

            self._publish(is_validating_otp=True, otp_error=None)
            email = current.email
            try:
                await asyncio.sleep(self._settings.validate_latency_seconds)
                outcome = self._engine.validate(email, current.otp_input)
            except Exception:
                logger.exception("Error validating OTP for %s", email)
                self._publish(is_validating_otp=False, otp_error=MSG_VALIDATE_FAILED)
                return

            if isinstance(outcome, Success):
                self._notify("otp_validation_succeeded", email)
                self._notify("session_started", email)
                self._otp_timer.stop()
                self._publish(
                    screen=AuthScreen.SESSION,
                    is_validating_otp=False,
                    otp_input="",
                    otp_error=None,
                    generated_otp="",
                    session_started_at=self._clock(),
                    session_duration_seconds=0,
                )
                self._session_timer.start()
            elif isinstance(outcome, WrongCode):
                self._notify(
                    "otp_validation_failed", email, outcome.reason, outcome.attempts_remaining
                )
                if outcome.attempts_remaining > 0:
                    self._publish(
                        is_validating_otp=False,
                        otp_attempts_remaining=outcome.attempts_remaining,
                        otp_error=incorrect_otp_message(outcome.attempts_remaining),
                        otp_input="",
                    )
                else:
                    self._otp_timer.stop()
                    self._publish(
                        is_validating_otp=False,
                        otp_attempts_remaining=0,
                        otp_error=MSG_MAX_ATTEMPTS_REGENERATE,
                        otp_input="",
                    )
            elif isinstance(outcome, Expired):
                self._notify("otp_validation_failed", email, outcome.reason)
                self._otp_timer.stop()
                self._publish(
                    is_validating_otp=False, is_otp_expired=True, otp_error=MSG_OTP_EXPIRED
                )
            elif isinstance(outcome, AttemptsExhausted):
                self._notify("otp_validation_failed", email, outcome.reason)
                self._otp_timer.stop()
                self._publish(
                    is_validating_otp=False, otp_attempts_remaining=0, otp_error=MSG_MAX_ATTEMPTS
                )
            elif isinstance(outcome, NoRecord):
                self._notify("otp_validation_failed", email, outcome.reason)
                self._publish(is_validating_otp=False, otp_error=MSG_NO_OTP)
            else:
                assert_never(outcome)

    async def resend_otp(self) -> None:
        """Stop the countdown and issue a fresh code for the same email."""
        async with self._lock:
            if self._state.screen is not AuthScreen.OTP_PENDING:
                logger.debug("Ignoring resend on %s", self._state.screen.value)
                return
            self._otp_timer.stop()
            await self._generate_locked()

    async def navigate_back(self) -> None:
        async with self._lock:
            if self._state.screen is not AuthScreen.OTP_PENDING:
                logger.debug("Ignoring back navigation on %s", self._state.screen.value)
                return
            self._otp_timer.stop()
            self._publish(
                screen=AuthScreen.LOGIN, otp_input="", otp_error=None, generated_otp=""
            )

    async def logout(self) -> int:
        """Reset the flow to its initial state.

        Returns the session duration in seconds (0 when no session was
        started), computed before anything is reset.
        """
        async with self._lock:
            current = self._state
            duration = self._session_seconds(current)
            self._notify("logged_out", current.email, duration)
            self._otp_timer.stop()
            self._session_timer.stop()
            self._engine.clear_all()
            self._publish_state(
                AuthState(otp_attempts_remaining=self._settings.otp_max_attempts)
            )
            logger.info("Logged out after %d second(s)", duration)
            return duration

    async def clear_error(self) -> None:
        async with self._lock:
            self._publish(error_message=None, otp_error=None)

    async def close(self) -> None:
        """Stop both timers; the state is left as is."""
        async with self._lock:
            self._otp_timer.stop()
            self._session_timer.stop()

    # ── Private helpers ──────────────────────────────────

    async def _generate_locked(self) -> None:
        current = self._state
        if not current.is_email_valid:
            self._publish(error_message=MSG_INVALID_EMAIL)
            return

        self._publish(is_generating_otp=True, error_message=None)
        try:
            await asyncio.sleep(self._settings.generate_latency_seconds)
            code = self._engine.generate(current.email)
        except Exception:
            logger.exception("Error generating OTP for %s", current.email)
            self._otp_timer.stop()
            self._publish(
                screen=AuthScreen.LOGIN,
                is_generating_otp=False,
                error_message=MSG_GENERATE_FAILED,
                otp_input="",
                otp_error=None,
                otp_seconds_remaining=0,
                generated_otp="",
            )
            return

        self._notify("otp_generated", current.email)
        self._publish(
            screen=AuthScreen.OTP_PENDING,
            is_generating_otp=False,
            otp_input="",
            otp_seconds_remaining=self._settings.otp_ttl_seconds,
            otp_attempts_remaining=self._settings.otp_max_attempts,
            is_otp_expired=False,
            otp_error=None,
            generated_otp=code,
        )
        self._otp_timer.start()
        # Delivery is simulated, the code is surfaced to the caller.
        logger.debug("Generated OTP for testing: %s", code)

    async def _on_otp_tick(self) -> bool:
        async with self._lock:
            remaining = max(self._state.otp_seconds_remaining - 1, 0)
            if remaining > 0:
                self._publish(otp_seconds_remaining=remaining)
                return True
            self._publish(
                otp_seconds_remaining=0, is_otp_expired=True, otp_error=MSG_OTP_EXPIRED
            )
            logger.info("OTP countdown reached zero for %s", self._state.email)
            return False

    async def _on_session_tick(self) -> bool:
        async with self._lock:
            if self._state.session_started_at is not None:
                self._publish(session_duration_seconds=self._session_seconds(self._state))
            return True

    def _session_seconds(self, state: AuthState) -> int:
        if state.session_started_at is None:
            return 0
        return max(int((self._clock() - state.session_started_at).total_seconds()), 0)

    def _publish(self, **changes: Any) -> None:
        self._publish_state(self._state.model_copy(update=changes))

    def _publish_state(self, new_state: AuthState) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _notify(self, event: str, *args: Any) -> None:
        try:
            getattr(self._analytics, event)(*args)
        except Exception:
            logger.exception("Analytics sink failed on %s", event)
