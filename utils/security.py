"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (access and refresh tokens use distinct secrets)
"""
from __future__ import annotations

from datetime import datetime, timezone
import uuid
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from api.config import AuthSettings
from utils.exceptions import InvalidTokenError

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


class TokenIssuer:
    """Signs and verifies the access/refresh token pair.

    The user id travels as the ``_id`` claim in both tokens. Only the access
    token carries profile claims; the refresh token stays minimal.
    """

    def __init__(self, settings: AuthSettings):
        self._settings = settings

    @property
    def access_secret(self) -> str:
        return self._settings.access_token_secret

    @property
    def refresh_secret(self) -> str:
        return self._settings.refresh_token_secret

    def _sign(self, claims: Dict[str, Any], secret: str, lifetime) -> str:
        now = _now()
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + lifetime).timestamp())
        # two tokens minted in the same second must still differ
        payload["jti"] = generate_jti()
        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)

    def issue_access_token(self, user) -> str:
        claims = {"_id": str(user.id), "username": user.username, "email": user.email}
        return self._sign(claims, self.access_secret, self._settings.access_token_expiry)

    def issue_refresh_token(self, user) -> str:
        return self._sign({"_id": str(user.id)}, self.refresh_secret, self._settings.refresh_token_expiry)

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT against ``secret``.
        Expired, tampered and malformed tokens all raise the same InvalidTokenError.
        """
        try:
            decoded = jwt.decode(
                token, secret, algorithms=[self._settings.algorithm], options={"require": ["exp", "_id"]}
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc
        return decoded

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)
