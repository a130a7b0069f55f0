"""Immutable snapshot of the authentication flow published to the UI."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class AuthScreen(str, Enum):
    """Screens the flow can be on."""

    LOGIN = "login"
    OTP_PENDING = "otp_pending"
    SESSION = "session"


class AuthState(BaseModel):
    """One published state of the login flow.

    Instances are frozen; every transition publishes a fresh copy built
    with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    screen: AuthScreen = AuthScreen.LOGIN

    # ── Login ─────────────────────────────────────────────
    email: str = ""
    is_email_valid: bool = False

    # ── OTP ───────────────────────────────────────────────
    otp_input: str = ""
    otp_seconds_remaining: int = 0
    otp_attempts_remaining: int = 3
    is_otp_expired: bool = False
    otp_error: str | None = None
    generated_otp: str = ""  # simulated delivery: shown to the user directly

    # ── Session ───────────────────────────────────────────
    session_started_at: datetime | None = None
    session_duration_seconds: int = 0

    # ── Loading ───────────────────────────────────────────
    is_generating_otp: bool = False
    is_validating_otp: bool = False

    # ── Login-level error ─────────────────────────────────
    error_message: str | None = None
