"""
One-time code generation.

Codes are 6-digit strings drawn uniformly from 100000-999999 using the
`secrets` module, so they cannot be derived from earlier codes or from
anything visible in a request.
"""

import secrets
from datetime import datetime, timedelta

from .ports import OneTimeCode

OTP_MIN = 100_000
OTP_MAX = 999_999


def generate_otp(window: timedelta, now: datetime) -> OneTimeCode:
    """
    Generate a fresh one-time code.

    Args:
        window: How long the code stays valid
        now: Current time (timezone-aware UTC)

    Returns:
        OneTimeCode expiring at `now + window`
    """
    code = str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))
    return OneTimeCode(code=code, expires_at=now + window)


def codes_match(stored: str | None, submitted: str | None) -> bool:
    """Constant-time comparison of a stored and a submitted code."""
    if not stored or submitted is None:
        return False
    return secrets.compare_digest(stored.encode(), submitted.encode())


def is_expired(code: OneTimeCode, now: datetime) -> bool:
    """A code is expired once its expiry instant is reached."""
    return code.expires_at <= now
