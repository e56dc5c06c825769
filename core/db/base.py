"""
Low-level database helpers (Postgres-only).
"""
from __future__ import annotations

from typing import Iterable

try:
    import psycopg
    from psycopg.rows import dict_row
except Exception as exc:  # pragma: no cover - required dependency
    raise RuntimeError("psycopg is required for Postgres") from exc


class StoreError(Exception):
    """Raised when the database cannot complete a query or write."""


def validate_database_url(url: str | None) -> str:
    if not url:
        raise ValueError("DATABASE_URL must be set for Postgres usage")
    if url.startswith("postgres://") or url.startswith("postgresql://"):
        return url
    raise ValueError("DATABASE_URL must start with postgres:// or postgresql://")


def _convert_qmarks(sql: str) -> str:
    if "?" not in sql:
        return sql
    return sql.replace("?", "%s")


class _CursorWrapper:
    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, sql: str, params: Iterable | None = None):
        sql = _convert_qmarks(sql)
        if params is None:
            return self._cursor.execute(sql)
        return self._cursor.execute(sql, params)

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self):
        return self._cursor.fetchall()

    @property
    def rowcount(self):
        return getattr(self._cursor, "rowcount", 0)


class _ConnWrapper:
    def __init__(self, conn):
        self._conn = conn

    def cursor(self):
        return _CursorWrapper(self._conn.cursor())

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()

    def close(self):
        return self._conn.close()


class Database:
    """
    Connection factory bound to one connection string.

    Built once at startup from Settings and handed to the stores; there is no
    module-level connection.
    """

    def __init__(self, url: str, connect_timeout: int = 10):
        self.url = validate_database_url(url)
        self.connect_timeout = connect_timeout

    def get_conn(self) -> _ConnWrapper:
        try:
            conn = psycopg.connect(self.url, row_factory=dict_row, connect_timeout=self.connect_timeout)
        except psycopg.Error as exc:
            raise StoreError(f"Could not connect to database: {exc.__class__.__name__}") from exc
        return _ConnWrapper(conn)


__all__ = ["Database", "StoreError", "validate_database_url"]
