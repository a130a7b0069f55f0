"""Tests for the login-flow input validators."""

import pytest

from passwordless_auth.validators import filter_otp_digits, is_valid_email


@pytest.mark.parametrize(
    "email",
    [
        "a@b.com",
        "alice@example.com",
        "user.name+tag@example.co.uk",
        "first_last%dept@mail-server.example.org",
        "a" * 256 + "@example.com",
    ],
)
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize(
    "email",
    [
        "",
        "   ",
        "plainaddress",
        "@example.com",
        "user@domain",
        "user@@example.com",
        "user@-example.com",
        "user@example..com",
        "a b@example.com",
        "a" * 257 + "@example.com",
    ],
)
def test_invalid_emails(email):
    assert not is_valid_email(email)


def test_filter_keeps_digits_only():
    assert filter_otp_digits("12a3-4 5") == "12345"


def test_filter_truncates_to_length():
    assert filter_otp_digits("1234567890") == "123456"
    assert filter_otp_digits("1234567890", length=4) == "1234"


def test_filter_drops_non_ascii_digits():
    assert filter_otp_digits("١٢12") == "12"
