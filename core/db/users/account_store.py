"""
Account persistence: lookups by field and single-row saves.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol

import psycopg

from core.accounts import Account, normalize_email
from core.db.base import Database, StoreError


_COLUMNS = """
    id, email, password_hash, name, is_verified,
    verification_token, verification_token_expires_at,
    reset_password_token, reset_password_expires_at,
    last_login, created_at, updated_at
"""


class DuplicateEmailError(StoreError):
    """An account with this email already exists."""


class AccountStore(Protocol):
    def get_by_email(self, email: str) -> Optional[Account]: ...

    def get_by_id(self, account_id: str) -> Optional[Account]: ...

    def get_by_verification_token(self, code: str, now: datetime) -> Optional[Account]: ...

    def get_by_reset_token(self, token: str, now: datetime) -> Optional[Account]: ...

    def insert(self, account: Account) -> Account: ...

    def save(self, account: Account) -> Account: ...


def _row_to_account(row: Dict) -> Account:
    return Account(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        name=row["name"],
        is_verified=bool(row["is_verified"]),
        verification_token=row["verification_token"],
        verification_token_expires_at=row["verification_token_expires_at"],
        reset_password_token=row["reset_password_token"],
        reset_password_expires_at=row["reset_password_expires_at"],
        last_login=row["last_login"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresAccountStore:
    """AccountStore backed by the `users` table."""

    def __init__(self, database: Database):
        self.database = database

    def _fetch_one(self, sql: str, params: tuple) -> Optional[Account]:
        conn = self.database.get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"Account lookup failed: {exc.__class__.__name__}") from exc
        finally:
            conn.close()
        return _row_to_account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM users WHERE email = ?",
            (normalize_email(email),),
        )

    def get_by_id(self, account_id: str) -> Optional[Account]:
        if not account_id:
            return None
        return self._fetch_one(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (str(account_id),))

    def get_by_verification_token(self, code: str, now: datetime) -> Optional[Account]:
        if not code:
            return None
        return self._fetch_one(
            f"""
            SELECT {_COLUMNS} FROM users
            WHERE verification_token = ? AND verification_token_expires_at > ?
            """,
            (code, now),
        )

    def get_by_reset_token(self, token: str, now: datetime) -> Optional[Account]:
        if not token:
            return None
        return self._fetch_one(
            f"""
            SELECT {_COLUMNS} FROM users
            WHERE reset_password_token = ? AND reset_password_expires_at > ?
            """,
            (token, now),
        )

    def insert(self, account: Account) -> Account:
        conn = self.database.get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO users (
                    email, password_hash, name, is_verified,
                    verification_token, verification_token_expires_at,
                    reset_password_token, reset_password_expires_at,
                    last_login
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING {_COLUMNS}
                """,
                (
                    normalize_email(account.email),
                    account.password_hash,
                    account.name,
                    account.is_verified,
                    account.verification_token,
                    account.verification_token_expires_at,
                    account.reset_password_token,
                    account.reset_password_expires_at,
                    account.last_login,
                ),
            )
            row = cur.fetchone()
            conn.commit()
        except psycopg.errors.UniqueViolation as exc:
            conn.rollback()
            raise DuplicateEmailError("User already exists") from exc
        except psycopg.Error as exc:
            conn.rollback()
            raise StoreError(f"Account insert failed: {exc.__class__.__name__}") from exc
        finally:
            conn.close()
        return _row_to_account(row)

    def save(self, account: Account) -> Account:
        """Overwrite every mutable column of the account's row."""
        conn = self.database.get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                UPDATE users
                SET email = ?,
                    password_hash = ?,
                    name = ?,
                    is_verified = ?,
                    verification_token = ?,
                    verification_token_expires_at = ?,
                    reset_password_token = ?,
                    reset_password_expires_at = ?,
                    last_login = ?,
                    updated_at = NOW()
                WHERE id = ?
                RETURNING {_COLUMNS}
                """,
                (
                    normalize_email(account.email),
                    account.password_hash,
                    account.name,
                    account.is_verified,
                    account.verification_token,
                    account.verification_token_expires_at,
                    account.reset_password_token,
                    account.reset_password_expires_at,
                    account.last_login,
                    account.id,
                ),
            )
            row = cur.fetchone()
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            raise StoreError(f"Account save failed: {exc.__class__.__name__}") from exc
        finally:
            conn.close()
        if not row:
            raise StoreError(f"Account {account.id} no longer exists")
        return _row_to_account(row)


__all__ = ["AccountStore", "DuplicateEmailError", "PostgresAccountStore"]
