import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.config import Settings
from core.accounts import normalize_email
from core.db.base import StoreError
from core.db.users import DuplicateEmailError
from core.emails import MailDeliveryError
from core.identity import IdentityService


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryAccountStore:
    """Stand-in for the Postgres store with the same matching rules."""

    def __init__(self):
        self.accounts = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreError("database unavailable")

    def _find(self, predicate):
        self._check()
        for account in self.accounts.values():
            if predicate(account):
                return copy.deepcopy(account)
        return None

    def get_by_email(self, email):
        email = normalize_email(email)
        return self._find(lambda a: a.email == email)

    def get_by_id(self, account_id):
        return self._find(lambda a: a.id == account_id)

    def get_by_verification_token(self, code, now):
        return self._find(
            lambda a: a.verification_token == code
            and a.verification_token_expires_at is not None
            and a.verification_token_expires_at > now
        )

    def get_by_reset_token(self, token, now):
        return self._find(
            lambda a: a.reset_password_token == token
            and a.reset_password_expires_at is not None
            and a.reset_password_expires_at > now
        )

    def insert(self, account):
        self._check()
        if any(a.email == normalize_email(account.email) for a in self.accounts.values()):
            raise DuplicateEmailError("User already exists")
        stored = copy.deepcopy(account)
        stored.id = uuid.uuid4().hex
        stored.email = normalize_email(stored.email)
        stored.created_at = stored.updated_at = datetime.now(timezone.utc)
        self.accounts[stored.id] = stored
        return copy.deepcopy(stored)

    def save(self, account):
        self._check()
        if account.id not in self.accounts:
            raise StoreError(f"Account {account.id} no longer exists")
        stored = copy.deepcopy(account)
        stored.updated_at = datetime.now(timezone.utc)
        self.accounts[stored.id] = stored
        return copy.deepcopy(stored)


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to_email, message):
        if self.fail:
            raise MailDeliveryError("Failed to send email: SMTPServerDisconnected")
        self.sent.append((to_email, message))

    def last_to(self, email):
        for to_email, message in reversed(self.sent):
            if to_email == email:
                return message
        return None


@pytest.fixture
def settings():
    return Settings(
        database_url="postgresql://localhost/identity_test",
        jwt_secret="test-secret",
        client_url="http://client.test",
    )


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryAccountStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def service(store, mailer, clock, settings):
    return IdentityService(store, mailer, client_url=settings.client_url, clock=clock)


@pytest.fixture
def app(settings, store, mailer, service):
    application = create_app(settings, store=store, mailer=mailer)
    application.state.identity = service
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
