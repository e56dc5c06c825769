"""
Helpers for signed session tokens, the session cookie and current-account lookup.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import jwt
from fastapi import HTTPException, Request
from fastapi.responses import Response

from app.config import Settings
from core.accounts import utcnow
from core.tokens import session_lifetime

SESSION_COOKIE_NAME = "token"
SESSION_COOKIE_MAX_AGE = int(session_lifetime().total_seconds())  # 7 days
JWT_ALGORITHM = "HS256"


class InvalidSessionToken(Exception):
    pass


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def issue_session_token(account_id: str, settings: Settings, now: Optional[datetime] = None) -> str:
    """Sign a token carrying the account id, valid for the session lifetime."""
    now = now or utcnow()
    payload = {
        "userId": str(account_id),
        "iat": now,
        "exp": now + session_lifetime(),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str, settings: Settings) -> str:
    """Return the account id embedded in a session token."""
    try:
        data: dict = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "userId"]},
        )
    except jwt.exceptions.InvalidTokenError as exc:
        raise InvalidSessionToken("Not a valid session token") from exc

    account_id = data.get("userId")
    if not isinstance(account_id, str) or not account_id:
        raise InvalidSessionToken("Session token has no account id")
    return account_id


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=SESSION_COOKIE_MAX_AGE,
        samesite="strict",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def require_account_id(request: Request) -> str:
    """
    Dependency for routes that need a signed-in account.
    Reads the session cookie and returns the account id, or answers 401.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized - no token provided")
    try:
        return decode_session_token(token, get_settings(request))
    except InvalidSessionToken:
        raise HTTPException(status_code=401, detail="Unauthorized - invalid token")


__all__ = [
    "SESSION_COOKIE_NAME",
    "SESSION_COOKIE_MAX_AGE",
    "InvalidSessionToken",
    "clear_session_cookie",
    "decode_session_token",
    "get_settings",
    "issue_session_token",
    "require_account_id",
    "set_session_cookie",
]
