"""
SessionManager: the authentication session lifecycle.

A user is either anonymous or holds exactly one active refresh token,
stored on the user row. Login and refresh overwrite it, logout clears it.
A refresh token is accepted only if it verifies against the refresh secret
AND matches the stored value, so rotation and logout revoke old tokens.
"""
from __future__ import annotations

import logging
from typing import NamedTuple

from sqlalchemy.exc import SQLAlchemyError

from models.credential_store import CredentialStore
from models.user import User
from utils.exceptions import InvalidInput, Unauthorized, NotFound, Internal, InvalidTokenError
from utils.security import TokenIssuer, hash_password, verify_password

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class LoginResult(NamedTuple):
    user: User
    tokens: TokenPair


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class SessionManager:
    def __init__(self, store: CredentialStore, issuer: TokenIssuer, starting_coins: int = 500):
        self._store = store
        self._issuer = issuer
        self._starting_coins = starting_coins

    def _issue_tokens(self, user: User) -> TokenPair:
        """Mint a fresh pair and persist the refresh token, replacing any previous one."""
        try:
            access_token = self._issuer.issue_access_token(user)
            refresh_token = self._issuer.issue_refresh_token(user)
            self._store.update_refresh_token(user.id, refresh_token)
        except (SQLAlchemyError, NotFound, ValueError, TypeError) as exc:
            logger.exception("token issuance failed for user %s", user.id)
            raise Internal("Something went wrong while generating access and refresh tokens") from exc
        return TokenPair(access_token, refresh_token)

    def register(self, username: str, email: str, password: str) -> User:
        if any(_blank(field) for field in (username, email, password)):
            raise InvalidInput("All fields are required")
        username = username.strip().lower()
        email = email.strip()

        user = self._store.create(
            username=username,
            email=email,
            password_hash=hash_password(password),
            coins=self._starting_coins,
        )
        logger.info("registered user %s", user.id)
        return user

    def login(self, identifier: str | None, password: str | None) -> LoginResult:
        if _blank(identifier):
            raise InvalidInput("Email or username is required")
        identifier = identifier.strip()
        if "@" in identifier:
            user = self._store.find_by_username_or_email(email=identifier)
        else:
            user = self._store.find_by_username_or_email(username=identifier.lower())
        if user is None:
            raise NotFound("User not found")

        if not verify_password(password or "", user.password_hash):
            raise Unauthorized("Incorrect password")

        tokens = self._issue_tokens(user)
        logger.info("user %s logged in", user.id)
        return LoginResult(user, tokens)

    def logout(self, user_id: str) -> None:
        self._store.update_refresh_token(user_id, None)
        logger.info("user %s logged out", user_id)

    def refresh_session(self, incoming_refresh_token: str | None) -> TokenPair:
        if _blank(incoming_refresh_token):
            raise Unauthorized("Unauthorized request")

        try:
            decoded = self._issuer.verify_refresh_token(incoming_refresh_token)
        except InvalidTokenError as exc:
            raise Unauthorized(str(exc)) from exc

        user = self._store.find_by_id(decoded.get("_id"))
        if user is None:
            raise Unauthorized("Invalid refresh token")

        # revocation check: only the stored token is live, whatever its expiry says
        if incoming_refresh_token != user.refresh_token:
            raise Unauthorized("Refresh token expired")

        tokens = self._issue_tokens(user)
        logger.info("rotated refresh token for user %s", user.id)
        return tokens

    def change_password(self, user_id: str, old_password: str | None, new_password: str | None,
                        confirm_password: str | None) -> None:
        if new_password != confirm_password:
            raise InvalidInput("Password and confirm password do not match")
        if _blank(new_password):
            raise InvalidInput("New password is required")

        user = self._store.find_by_id(user_id)
        if user is None:
            raise Unauthorized("Invalid access token")
        if not verify_password(old_password or "", user.password_hash):
            raise Unauthorized("Incorrect old password")

        self._store.update_password(user.id, hash_password(new_password))
        logger.info("password changed for user %s", user.id)

    def update_profile(self, user_id: str, username: str | None = None, email: str | None = None) -> User:
        fields = {}
        if not _blank(username):
            fields["username"] = username.strip().lower()
        if not _blank(email):
            fields["email"] = email.strip()
        if not fields:
            raise InvalidInput("Username or email is required")
        return self._store.update_profile(user_id, fields)

    def get_current_user(self, user: User) -> User:
        return user
