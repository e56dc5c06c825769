"""
Outcome type returned by every identity operation.

Operations never raise for business-rule failures; they return an Outcome and
the HTTP layer decides the status code.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from core.accounts import Account


class FailureReason(enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    UPSTREAM = "upstream"


@dataclass(frozen=True)
class Outcome:
    ok: bool
    message: str = ""
    account: Optional[Account] = None
    reason: Optional[FailureReason] = None
    # Set when the caller should receive a session cookie for this account.
    session_account_id: Optional[str] = None

    @classmethod
    def success(
        cls,
        message: str = "",
        account: Optional[Account] = None,
        session_account_id: Optional[str] = None,
    ) -> "Outcome":
        return cls(ok=True, message=message, account=account, session_account_id=session_account_id)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> "Outcome":
        return cls(ok=False, message=message, reason=reason)


__all__ = ["FailureReason", "Outcome"]
