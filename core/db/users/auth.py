"""
Password hashing and verification.
"""
from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10
# bcrypt only uses the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


def _encode(raw_password: str) -> bytes:
    return raw_password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(raw_password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(raw_password), salt).decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    if not raw_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(raw_password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt hash
        return False


__all__ = ["BCRYPT_ROUNDS", "hash_password", "verify_password"]
