"""
Postgres-backed store tests. Set DATABASE_URL to a disposable database to run them.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("DATABASE_URL"), reason="DATABASE_URL must be set for Postgres-only tests."
)

from core.accounts import Account
from core.db.base import Database, StoreError
from core.db.schema import init_db
from core.db.users import DuplicateEmailError, PostgresAccountStore

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    database = Database(os.environ["DATABASE_URL"])
    init_db(database)
    conn = database.get_conn()
    conn.cursor().execute("TRUNCATE users")
    conn.commit()
    conn.close()
    yield PostgresAccountStore(database)
    conn = database.get_conn()
    conn.cursor().execute("TRUNCATE users")
    conn.commit()
    conn.close()


def _account(email="a@x.com"):
    account = Account(email=email, password_hash="hash", name="A", last_login=NOW)
    account.set_verification_token("123456", NOW + timedelta(hours=24))
    return account


def test_insert_assigns_id_and_timestamps(store):
    created = store.insert(_account(" A@X.com "))
    assert created.id
    assert created.email == "a@x.com"
    assert created.created_at is not None
    assert store.get_by_id(created.id).email == "a@x.com"
    assert store.get_by_email("a@x.com").id == created.id


def test_unique_email(store):
    store.insert(_account())
    with pytest.raises(DuplicateEmailError):
        store.insert(_account())


def test_verification_lookup_is_strict_on_expiry(store):
    store.insert(_account())
    expires = NOW + timedelta(hours=24)

    assert store.get_by_verification_token("123456", expires - timedelta(seconds=1)) is not None
    assert store.get_by_verification_token("123456", expires) is None
    assert store.get_by_verification_token("654321", NOW) is None


def test_save_clears_tokens(store):
    created = store.insert(_account())
    created.clear_verification_token()
    created.set_reset_token("ab" * 20, NOW + timedelta(hours=1))
    store.save(created)

    assert store.get_by_verification_token("123456", NOW) is None
    found = store.get_by_reset_token("ab" * 20, NOW)
    assert found.id == created.id
    assert store.get_by_reset_token("ab" * 20, NOW + timedelta(hours=1)) is None


def test_save_missing_row(store):
    ghost = _account()
    ghost.id = "00000000-0000-0000-0000-000000000000"
    with pytest.raises(StoreError):
        store.save(ghost)


def test_get_by_id_unknown(store):
    assert store.get_by_id("not-a-real-id") is None
