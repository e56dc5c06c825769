"""
Process configuration, read once at startup.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from core.db.base import validate_database_url

ROUTE_PREFIX = "/api/auth"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    client_url: str = "http://localhost:5173"
    environment: str = "development"
    port: int = 3000
    email_user: Optional[str] = None
    email_password: Optional[str] = None
    email_from: Optional[str] = None
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build Settings from environment variables.

        When `environ` is omitted the process environment is used, after
        loading `.env` (override=True so edits take effect on restart).
        """
        if environ is None:
            load_dotenv(override=True)
            environ = os.environ

        try:
            database_url = validate_database_url(environ.get("DATABASE_URL"))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        jwt_secret = environ.get("JWT_SECRET")
        if not jwt_secret:
            raise ConfigError("JWT_SECRET must be set to sign session tokens")

        try:
            port = int(environ.get("PORT", "3000"))
            smtp_port = int(environ.get("SMTP_PORT", "587"))
        except ValueError as exc:
            raise ConfigError(f"Invalid port value: {exc}") from exc

        return cls(
            database_url=database_url,
            jwt_secret=jwt_secret,
            client_url=(environ.get("CLIENT_URL") or "http://localhost:5173").rstrip("/"),
            environment=environ.get("NODE_ENV") or environ.get("APP_ENV") or "development",
            port=port,
            email_user=environ.get("EMAIL_USER"),
            email_password=environ.get("EMAIL_PASSWORD"),
            email_from=environ.get("EMAIL_FROM"),
            smtp_server=environ.get("SMTP_SERVER", "smtp.gmail.com"),
            smtp_port=smtp_port,
        )


__all__ = ["ConfigError", "ROUTE_PREFIX", "Settings"]
