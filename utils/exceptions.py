"""
Error taxonomy shared by the services and the HTTP layer.
Each ApiError carries the status code it is rendered with.
"""
from __future__ import annotations


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: str | None = None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class Internal(ApiError):
    status_code = 500


class InvalidTokenError(Exception):
    """Raised for any token that fails signature, expiry or decoding checks."""

    message = "Invalid or expired token"

    def __init__(self):
        super().__init__(self.message)
