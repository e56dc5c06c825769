"""
User-related storage helpers, split by responsibility.
"""
from core.db.users.auth import hash_password, verify_password
from core.db.users.account_store import (
    AccountStore,
    DuplicateEmailError,
    PostgresAccountStore,
)

__all__ = [
    "hash_password",
    "verify_password",
    "AccountStore",
    "DuplicateEmailError",
    "PostgresAccountStore",
]
