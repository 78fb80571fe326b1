from __future__ import annotations
from functools import wraps
from flask import request, g

from api.extensions import get_token_issuer, get_credential_store
from utils.exceptions import Unauthorized, InvalidTokenError

ACCESS_COOKIE = "accessToken"


def extract_access_token() -> str | None:
    """Token from the accessToken cookie, else from an ``Authorization: Bearer`` header."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = extract_access_token()
            if not token:
                raise Unauthorized("Unauthorized request")
            try:
                decoded = get_token_issuer().verify_access_token(token)
            except InvalidTokenError as e:
                raise Unauthorized(str(e)) from e

            user = get_credential_store().find_by_id(decoded.get("_id"))
            if not user:
                raise Unauthorized("Invalid access token")
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
