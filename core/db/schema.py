"""
Schema helpers for Postgres.
"""
from __future__ import annotations

import logging

from core.db.base import Database

log = logging.getLogger(__name__)


def init_db(database: Database) -> None:
    """Create the users table and its lookup indexes if they don't exist."""
    conn = database.get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users(
                id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                name TEXT NOT NULL,
                is_verified BOOLEAN NOT NULL DEFAULT FALSE,
                verification_token TEXT,
                verification_token_expires_at TIMESTAMPTZ,
                reset_password_token TEXT,
                reset_password_expires_at TIMESTAMPTZ,
                last_login TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_users_verification_token ON users (verification_token)"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_users_reset_password_token ON users (reset_password_token)"
        )
        conn.commit()
    finally:
        conn.close()
    log.info("Database schema ready")


__all__ = ["init_db"]
