"""Input validators for the login flow."""

import re
import string

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


def is_valid_email(email: str) -> bool:
    """Return ``True`` if *email* has the accepted address shape."""
    return bool(email.strip()) and EMAIL_PATTERN.fullmatch(email) is not None


def filter_otp_digits(text: str, length: int = 6) -> str:
    """Keep ASCII digits only, truncated to *length* characters."""
    return "".join(ch for ch in text if ch in string.digits)[:length]
