"""
Generation and expiry rules for verification, reset and session tokens.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Optional

VERIFY_TOKEN_HOURS = 24
RESET_TOKEN_MINUTES = 60
SESSION_TOKEN_DAYS = 7

RESET_TOKEN_BYTES = 20  # 160 bits


def generate_verification_code() -> str:
    """Six-digit numeric code in the range 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def verification_expiry(now: datetime) -> datetime:
    return now + timedelta(hours=VERIFY_TOKEN_HOURS)


def reset_expiry(now: datetime) -> datetime:
    return now + timedelta(minutes=RESET_TOKEN_MINUTES)


def session_lifetime() -> timedelta:
    return timedelta(days=SESSION_TOKEN_DAYS)


def is_unexpired(expires_at: Optional[datetime], now: datetime) -> bool:
    """A token is usable strictly before its expiry instant."""
    return expires_at is not None and expires_at > now


__all__ = [
    "VERIFY_TOKEN_HOURS",
    "RESET_TOKEN_MINUTES",
    "SESSION_TOKEN_DAYS",
    "generate_verification_code",
    "generate_reset_token",
    "verification_expiry",
    "reset_expiry",
    "session_lifetime",
    "is_unexpired",
]
