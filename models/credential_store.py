"""
CredentialStore: user persistence on top of DBStorage.

Lookups and single-row updates only; callers decide what to expose
(UserOutSchema strips password_hash and refresh_token).
"""
from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.user import User
from utils.exceptions import Conflict, NotFound

PROFILE_FIELDS = ("username", "email")


class CredentialStore:
    def __init__(self, storage: DBStorage):
        self._storage = storage

    def _query(self):
        return self._storage.get_session().query(User)

    def _commit(self, conflict_message: str):
        try:
            self._storage.save()
        except IntegrityError as exc:
            # unique username/email lost a race with another writer
            raise Conflict(conflict_message) from exc

    def exists(self, username: str | None = None, email: str | None = None) -> bool:
        return self.find_by_username_or_email(username=username, email=email) is not None

    def create(self, username: str, email: str, password_hash: str, coins: int = 500) -> User:
        if self.exists(username=username, email=email):
            raise Conflict("User already exists")
        user = User(username=username, email=email, password_hash=password_hash, coins=coins)
        self._storage.new(user)
        self._commit("User already exists")
        return user

    def find_by_username_or_email(self, username: str | None = None, email: str | None = None) -> User | None:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None
        return self._query().filter(or_(*clauses)).first()

    def find_by_id(self, user_id: str | None) -> User | None:
        return self._storage.get(User, user_id)

    def _require(self, user_id: str) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_refresh_token(self, user_id: str, token: str | None) -> User:
        user = self._require(user_id)
        user.refresh_token = token
        self._storage.new(user)
        self._storage.save()
        return user

    def update_password(self, user_id: str, password_hash: str) -> User:
        user = self._require(user_id)
        user.password_hash = password_hash
        self._storage.new(user)
        self._storage.save()
        return user

    def update_profile(self, user_id: str, fields: dict) -> User:
        user = self._require(user_id)
        changes = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}
        if "username" in changes:
            clash = self._query().filter(User.username == changes["username"], User.id != user.id).first()
            if clash:
                raise Conflict("Username already taken")
        if "email" in changes:
            clash = self._query().filter(User.email == changes["email"], User.id != user.id).first()
            if clash:
                raise Conflict("Email already taken")
        for key, value in changes.items():
            setattr(user, key, value)
        self._storage.new(user)
        self._commit("Username or email already taken")
        return user
