"""Passwordless Auth — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP ───────────────────────────────────────────────
    otp_length: int = 6
    otp_ttl_seconds: int = 60
    otp_max_attempts: int = 3

    # ── Timers ────────────────────────────────────────────
    tick_interval_seconds: float = 1.0

    # ── Simulated latency ─────────────────────────────────
    generate_latency_seconds: float = 0.5
    validate_latency_seconds: float = 0.3

    # ── App ───────────────────────────────────────────────
    app_name: str = "Passwordless Auth"
    debug: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
