"""
Account record shared by the store, the identity service and the HTTP layer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Account:
    email: str
    password_hash: str
    name: str
    id: Optional[str] = None
    is_verified: bool = False
    verification_token: Optional[str] = None
    verification_token_expires_at: Optional[datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expires_at: Optional[datetime] = None
    last_login: datetime = field(default_factory=utcnow)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # A token and its expiry are only ever changed together.

    def set_verification_token(self, token: str, expires_at: datetime) -> None:
        self.verification_token = token
        self.verification_token_expires_at = expires_at

    def clear_verification_token(self) -> None:
        self.verification_token = None
        self.verification_token_expires_at = None

    def set_reset_token(self, token: str, expires_at: datetime) -> None:
        self.reset_password_token = token
        self.reset_password_expires_at = expires_at

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expires_at = None

    def to_public_dict(self) -> Dict:
        """
        JSON document returned to clients. The password hash is never included
        and cleared token fields are left out instead of being sent as null.
        """
        data = {
            "_id": self.id,
            "email": self.email,
            "name": self.name,
            "isVerified": self.is_verified,
            "lastLogin": _iso(self.last_login),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if self.verification_token is not None:
            data["verificationToken"] = self.verification_token
            data["verificationTokenExpiresAt"] = _iso(self.verification_token_expires_at)
        if self.reset_password_token is not None:
            data["resetPasswordToken"] = self.reset_password_token
            data["resetPasswordExpiresAt"] = _iso(self.reset_password_expires_at)
        return data

    def __repr__(self) -> str:
        return f"Account(id={self.id!r}, email={self.email!r}, is_verified={self.is_verified!r})"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


__all__ = ["Account", "normalize_email", "utcnow"]
