"""
Account lifecycle operations: registration, email verification, login,
logout, password reset and auth-status checks.

Every operation performs its store and mail calls one after another and
returns an Outcome. Store and mail failures are reported as UPSTREAM outcomes;
a write that was committed before a failed email is kept.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from core import emails, tokens
from core.accounts import Account, normalize_email, utcnow
from core.db.base import StoreError
from core.db.users import AccountStore, DuplicateEmailError, hash_password, verify_password
from core.emails import MailDeliveryError, Mailer
from core.results import FailureReason, Outcome

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_VERIFICATION_CODE = "Invalid or expired verification code"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
USER_NOT_FOUND = "User not found"


def _upstream(exc: Exception) -> Outcome:
    return Outcome.failure(FailureReason.UPSTREAM, str(exc))


class IdentityService:
    def __init__(
        self,
        store: AccountStore,
        mailer: Mailer,
        client_url: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.mailer = mailer
        self.client_url = client_url.rstrip("/")
        self.clock = clock

    def reset_url(self, token: str) -> str:
        return f"{self.client_url}/reset-password/{token}"

    def register(self, email: Optional[str], password: Optional[str], name: Optional[str]) -> Outcome:
        email = normalize_email(email or "")
        if not email or not password or not name:
            return Outcome.failure(FailureReason.VALIDATION, "All fields are required")

        try:
            if self.store.get_by_email(email):
                log.info("Signup rejected, email already registered")
                return Outcome.failure(FailureReason.CONFLICT, "User already exists")

            now = self.clock()
            code = tokens.generate_verification_code()
            account = Account(email=email, password_hash=hash_password(password), name=name, last_login=now)
            account.set_verification_token(code, tokens.verification_expiry(now))
            account = self.store.insert(account)
        except DuplicateEmailError:
            # Lost a race with a concurrent signup for the same email.
            return Outcome.failure(FailureReason.CONFLICT, "User already exists")
        except StoreError as exc:
            log.error("Signup failed in store: %s", exc)
            return _upstream(exc)

        try:
            self.mailer.send(account.email, emails.verification_email(code))
        except MailDeliveryError as exc:
            log.warning("Account %s created but verification email failed: %s", account.id, exc)
            return _upstream(exc)

        return Outcome.success("User created successfully", account=account, session_account_id=account.id)

    def verify_email(self, code: Optional[str]) -> Outcome:
        if not code:
            return Outcome.failure(FailureReason.NOT_FOUND, INVALID_VERIFICATION_CODE)

        try:
            now = self.clock()
            account = self.store.get_by_verification_token(str(code), now)
            if not account or not tokens.is_unexpired(account.verification_token_expires_at, now):
                return Outcome.failure(FailureReason.NOT_FOUND, INVALID_VERIFICATION_CODE)

            account.is_verified = True
            account.clear_verification_token()
            account = self.store.save(account)
        except StoreError as exc:
            log.error("Email verification failed in store: %s", exc)
            return _upstream(exc)

        try:
            self.mailer.send(account.email, emails.welcome_email(account.name))
        except MailDeliveryError as exc:
            log.warning("Account %s verified but welcome email failed: %s", account.id, exc)
            return _upstream(exc)

        return Outcome.success("Email verified successfully", account=account)

    def login(self, email: Optional[str], password: Optional[str]) -> Outcome:
        # Unknown email and wrong password must be indistinguishable.
        invalid = Outcome.failure(FailureReason.UNAUTHORIZED, INVALID_CREDENTIALS)
        if not email or not password:
            return invalid

        try:
            account = self.store.get_by_email(email)
            if not account or not verify_password(password, account.password_hash):
                return invalid

            account.last_login = self.clock()
            account = self.store.save(account)
        except StoreError as exc:
            log.error("Login failed in store: %s", exc)
            return _upstream(exc)

        return Outcome.success("Logged in successfully", account=account, session_account_id=account.id)

    def logout(self) -> Outcome:
        # Sessions are stateless; the token stays valid until it expires.
        return Outcome.success("Logged out successfully")

    def forgot_password(self, email: Optional[str]) -> Outcome:
        if not email:
            return Outcome.failure(FailureReason.VALIDATION, "Email is required")

        try:
            account = self.store.get_by_email(email)
            if not account:
                return Outcome.failure(FailureReason.NOT_FOUND, USER_NOT_FOUND)

            reset_token = tokens.generate_reset_token()
            account.set_reset_token(reset_token, tokens.reset_expiry(self.clock()))
            account = self.store.save(account)
        except StoreError as exc:
            log.error("Password reset request failed in store: %s", exc)
            return _upstream(exc)

        try:
            self.mailer.send(account.email, emails.password_reset_request_email(self.reset_url(reset_token)))
        except MailDeliveryError as exc:
            log.warning("Reset token stored for %s but email failed: %s", account.id, exc)
            return _upstream(exc)

        return Outcome.success("Password reset link sent to your email")

    def reset_password(self, token: Optional[str], password: Optional[str]) -> Outcome:
        if not password:
            return Outcome.failure(FailureReason.VALIDATION, "Password is required")
        if not token:
            return Outcome.failure(FailureReason.NOT_FOUND, INVALID_RESET_TOKEN)

        try:
            now = self.clock()
            account = self.store.get_by_reset_token(token, now)
            if not account or not tokens.is_unexpired(account.reset_password_expires_at, now):
                return Outcome.failure(FailureReason.NOT_FOUND, INVALID_RESET_TOKEN)

            account.password_hash = hash_password(password)
            account.clear_reset_token()
            account = self.store.save(account)
        except StoreError as exc:
            log.error("Password reset failed in store: %s", exc)
            return _upstream(exc)

        try:
            self.mailer.send(account.email, emails.password_reset_success_email())
        except MailDeliveryError as exc:
            log.warning("Password reset for %s but confirmation email failed: %s", account.id, exc)
            return _upstream(exc)

        return Outcome.success("Password reset successful")

    def check_auth(self, account_id: Optional[str]) -> Outcome:
        try:
            account = self.store.get_by_id(account_id) if account_id else None
        except StoreError as exc:
            log.error("Auth check failed in store: %s", exc)
            return _upstream(exc)

        if not account:
            return Outcome.failure(FailureReason.NOT_FOUND, USER_NOT_FOUND)
        return Outcome.success(account=account)


__all__ = ["IdentityService"]
