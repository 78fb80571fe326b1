"""Unit tests for services/session_manager.py -- the session state machine."""
import pytest
from sqlalchemy.exc import OperationalError

from utils.exceptions import Conflict, InvalidInput, Internal, NotFound, Unauthorized


@pytest.fixture
def alice(session_manager):
    return session_manager.register("Alice", "a@x.com", "Secret1")


class TestRegister:
    def test_username_is_lowercased_and_coins_granted(self, alice):
        assert alice.username == "alice"
        assert alice.email == "a@x.com"
        assert alice.coins == 500
        assert alice.password_hash != "Secret1"

    @pytest.mark.parametrize(
        "username,email,password",
        [("", "a@x.com", "pw"), ("   ", "a@x.com", "pw"), ("bob", " ", "pw"), ("bob", "b@x.com", ""), (None, "b@x.com", "pw")],
    )
    def test_blank_fields_are_invalid(self, session_manager, username, email, password):
        with pytest.raises(InvalidInput):
            session_manager.register(username, email, password)

    def test_duplicate_username_differs_only_in_case(self, session_manager, alice):
        with pytest.raises(Conflict):
            session_manager.register("ALICE", "other@x.com", "pw")

    def test_duplicate_email(self, session_manager, alice):
        with pytest.raises(Conflict):
            session_manager.register("bob", "a@x.com", "pw")


class TestLogin:
    def test_login_by_username_any_case(self, session_manager, alice):
        user, tokens = session_manager.login("ALICE", "Secret1")
        assert user.id == alice.id
        assert tokens.access_token and tokens.refresh_token
        assert user.refresh_token == tokens.refresh_token

    def test_login_by_email(self, session_manager, alice):
        user, _ = session_manager.login("a@x.com", "Secret1")
        assert user.id == alice.id

    def test_email_is_matched_as_stored(self, session_manager, alice):
        with pytest.raises(NotFound):
            session_manager.login("A@X.COM", "Secret1")

    def test_missing_identifier(self, session_manager, alice):
        with pytest.raises(InvalidInput):
            session_manager.login(None, "Secret1")
        with pytest.raises(InvalidInput):
            session_manager.login("  ", "Secret1")

    def test_unknown_user(self, session_manager, alice):
        with pytest.raises(NotFound):
            session_manager.login("bob", "Secret1")

    def test_wrong_or_missing_password(self, session_manager, alice):
        with pytest.raises(Unauthorized):
            session_manager.login("alice", "wrong")
        with pytest.raises(Unauthorized):
            session_manager.login("alice", None)

    def test_second_login_supersedes_first_refresh_token(self, session_manager, alice):
        _, first = session_manager.login("alice", "Secret1")
        _, second = session_manager.login("alice", "Secret1")
        with pytest.raises(Unauthorized, match="Refresh token expired"):
            session_manager.refresh_session(first.refresh_token)
        assert session_manager.refresh_session(second.refresh_token).refresh_token

    def test_store_failure_while_issuing_is_internal(self, session_manager, alice, monkeypatch, app):
        store = app.extensions["credential_store"]

        def boom(*args, **kwargs):
            raise OperationalError("UPDATE users", {}, Exception("database is locked"))

        monkeypatch.setattr(store, "update_refresh_token", boom)
        with pytest.raises(Internal) as exc:
            session_manager.login("alice", "Secret1")
        assert "database" not in exc.value.message


class TestRefresh:
    def test_rotation_is_one_shot(self, session_manager, alice):
        _, tokens = session_manager.login("alice", "Secret1")
        rotated = session_manager.refresh_session(tokens.refresh_token)
        assert rotated.refresh_token != tokens.refresh_token
        assert rotated.access_token != tokens.access_token
        with pytest.raises(Unauthorized):
            session_manager.refresh_session(tokens.refresh_token)
        assert session_manager.refresh_session(rotated.refresh_token)

    def test_missing_token(self, session_manager):
        with pytest.raises(Unauthorized, match="Unauthorized request"):
            session_manager.refresh_session(None)
        with pytest.raises(Unauthorized):
            session_manager.refresh_session("")

    def test_access_token_is_not_a_refresh_token(self, session_manager, alice):
        _, tokens = session_manager.login("alice", "Secret1")
        with pytest.raises(Unauthorized, match="Invalid or expired token"):
            session_manager.refresh_session(tokens.access_token)

    def test_deleted_user(self, session_manager, alice, app):
        from models import storage

        _, tokens = session_manager.login("alice", "Secret1")
        storage.delete(storage.get(type(alice), alice.id))
        storage.save()
        with pytest.raises(Unauthorized, match="Invalid refresh token"):
            session_manager.refresh_session(tokens.refresh_token)

    def test_logout_revokes_refresh_token(self, session_manager, alice):
        _, tokens = session_manager.login("alice", "Secret1")
        session_manager.logout(alice.id)
        with pytest.raises(Unauthorized, match="Refresh token expired"):
            session_manager.refresh_session(tokens.refresh_token)


class TestChangePassword:
    def test_mismatched_confirmation(self, session_manager, alice):
        with pytest.raises(InvalidInput):
            session_manager.change_password(alice.id, "Secret1", "NewSecret", "Different")

    def test_wrong_old_password(self, session_manager, alice):
        with pytest.raises(Unauthorized):
            session_manager.change_password(alice.id, "nope", "NewSecret", "NewSecret")

    def test_new_password_required_for_login_and_session_kept(self, session_manager, alice):
        _, tokens = session_manager.login("alice", "Secret1")
        session_manager.change_password(alice.id, "Secret1", "NewSecret", "NewSecret")

        with pytest.raises(Unauthorized):
            session_manager.login("alice", "Secret1")
        # the existing refresh token was not touched by the change
        assert session_manager.refresh_session(tokens.refresh_token)
        assert session_manager.login("alice", "NewSecret")


class TestUpdateProfile:
    def test_requires_a_field(self, session_manager, alice):
        with pytest.raises(InvalidInput):
            session_manager.update_profile(alice.id)
        with pytest.raises(InvalidInput):
            session_manager.update_profile(alice.id, username="  ", email=None)

    def test_username_is_lowercased(self, session_manager, alice):
        user = session_manager.update_profile(alice.id, username="Alicia")
        assert user.username == "alicia"
        assert user.email == "a@x.com"

    def test_get_current_user_returns_same_user(self, session_manager, alice):
        assert session_manager.get_current_user(alice) is alice
