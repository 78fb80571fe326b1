"""Unit tests for models/credential_store.py against the in-memory database."""
import pytest

from models import storage
from models.credential_store import CredentialStore
from models.schemas.user import UserOutSchema
from utils.exceptions import Conflict, NotFound


@pytest.fixture
def store(app):
    return CredentialStore(storage)


@pytest.fixture
def alice(store):
    return store.create("alice", "a@x.com", "hash-a")


def test_create_assigns_id_and_defaults(alice):
    assert alice.id
    assert alice.coins == 500
    assert alice.refresh_token is None
    assert alice.created_at is not None


def test_create_rejects_taken_username_or_email(store, alice):
    with pytest.raises(Conflict):
        store.create("alice", "other@x.com", "hash")
    with pytest.raises(Conflict):
        store.create("bob", "a@x.com", "hash")
    assert storage.count() == 1


def test_find_by_username_or_email(store, alice):
    assert store.find_by_username_or_email(username="alice").id == alice.id
    assert store.find_by_username_or_email(email="a@x.com").id == alice.id
    assert store.find_by_username_or_email(username="nobody") is None
    assert store.find_by_username_or_email() is None


def test_find_by_id(store, alice):
    assert store.find_by_id(alice.id).username == "alice"
    assert store.find_by_id("missing") is None
    assert store.find_by_id(None) is None


def test_refresh_token_slot_is_overwritten_and_cleared(store, alice):
    store.update_refresh_token(alice.id, "first")
    store.update_refresh_token(alice.id, "second")
    assert store.find_by_id(alice.id).refresh_token == "second"
    store.update_refresh_token(alice.id, None)
    assert store.find_by_id(alice.id).refresh_token is None


def test_update_password_only_touches_hash(store, alice):
    store.update_password(alice.id, "new-hash")
    user = store.find_by_id(alice.id)
    assert user.password_hash == "new-hash"
    assert user.username == "alice"


def test_update_profile_is_partial(store, alice):
    store.update_profile(alice.id, {"email": "new@x.com"})
    user = store.find_by_id(alice.id)
    assert user.email == "new@x.com"
    assert user.username == "alice"


def test_update_profile_ignores_unknown_fields(store, alice):
    store.update_profile(alice.id, {"username": "alicia", "coins": 10, "password_hash": "x"})
    user = store.find_by_id(alice.id)
    assert user.username == "alicia"
    assert user.coins == 500
    assert user.password_hash == "hash-a"


def test_update_profile_rejects_taken_values(store, alice):
    store.create("bob", "b@x.com", "hash-b")
    with pytest.raises(Conflict):
        store.update_profile(alice.id, {"username": "bob"})
    with pytest.raises(Conflict):
        store.update_profile(alice.id, {"email": "b@x.com"})


def test_update_unknown_user(store):
    with pytest.raises(NotFound):
        store.update_refresh_token("missing", None)


def test_out_schema_hides_secrets(store, alice):
    store.update_refresh_token(alice.id, "token")
    dumped = UserOutSchema().dump(store.find_by_id(alice.id))
    assert dumped["username"] == "alice"
    assert "password_hash" not in dumped
    assert "refresh_token" not in dumped
