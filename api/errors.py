import logging
import traceback

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from utils.exceptions import ApiError

logger = logging.getLogger(__name__)


def _include_stack() -> bool:
    return bool(current_app and current_app.config.get("APP_ENV") == "dev" and current_app.debug)


def error_response(message: str, status: int, errors=None, exc: Exception | None = None):
    payload = {"success": False, "statusCode": status, "message": message}
    if errors:
        payload["errors"] = errors
    if exc is not None and _include_stack():
        payload["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("%s: %s", err.__class__.__name__, err.message, exc_info=err.__cause__ or err)
        else:
            logger.info("%s (%s): %s", err.__class__.__name__, err.status_code, err.message)
        return error_response(err.message, err.status_code, errors=err.errors, exc=err)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("Route not found", 404)

    # Marshmallow validation errors are bad input
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("Invalid input", 400, errors=err.messages, exc=err)

    # Unique constraints that slipped past the store's own checks
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.warning("integrity error: %s", getattr(err, "orig", err))
        return error_response("Resource already exists", 409, exc=err)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description, err.code or 400)

    # 500 Internal Error (catch-all); the cause is logged, never sent
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logging.exception("Unhandled exception", exc_info=err)
        return error_response("Something went wrong!", 500, exc=err)
