import logging
import traceback
from datetime import datetime, timezone

from flask import jsonify, current_app, request
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, DBAPIError

from api.config import is_production
from models.db_errors import is_unique_violation, is_write_conflict

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors the API answers with a specific status."""

    status = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(AppError):
    status = 400
    error = "VALIDATION_ERROR"
    default_message = "Invalid input"


class Unauthorized(AppError):
    status = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized"


class Forbidden(AppError):
    status = 403
    error = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(AppError):
    status = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(AppError):
    status = 409
    error = "CONFLICT"
    default_message = "Resource already exists"


class Locked(AppError):
    status = 423
    error = "LOCKED"
    default_message = "Resource conflict - please try again"


class Internal(AppError):
    pass


def _stack(err: BaseException):
    lines = traceback.format_exception(type(err), err, err.__traceback__)
    return [line.strip() for chunk in lines for line in chunk.splitlines() if line.strip()]


def error_response(error: str, message: str, status: int, details: dict | None = None, exc: BaseException | None = None):
    payload = {
        "error": error,
        "message": message,
        "status": status,
        "method": request.method,
        "url": request.full_path.rstrip("?"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        payload["details"] = details
    if exc is not None and not is_production(current_app.config):
        payload["stack"] = _stack(exc)
    return jsonify(payload), status


def _log(err: BaseException, status: int):
    if status >= 500:
        logger.error("Unhandled exception on %s %s", request.method, request.path, exc_info=err)
    elif current_app.debug:
        logger.debug("%s on %s %s: %s", status, request.method, request.path, err)


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        _log(err, err.status)
        return error_response(err.error, err.message, err.status, details=err.details, exc=err)

    # Marshmallow validation errors: request body rejected before storage is touched
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        _log(err, 400)
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages, exc=err)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        _log(err, 409)
        message = str(getattr(err, "orig", err))
        if is_unique_violation(err):
            return error_response("CONFLICT", "Resource already exists", 409, details={"db_error": message}, exc=err)
        lower_msg = message.lower()
        if "foreign key" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400, details={"db_error": message}, exc=err)
        return error_response("BAD_REQUEST", "Integrity error.", 400, details={"db_error": message}, exc=err)

    # Driver errors: write-write conflicts must be retried by the caller
    @app.errorhandler(DBAPIError)
    def handle_db_error(err: DBAPIError):
        if is_write_conflict(err):
            _log(err, 423)
            return error_response(Locked.error, Locked.default_message, 423, exc=err)
        _log(err, 500)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, exc=err)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        # "Method Not Allowed" -> "METHOD_NOT_ALLOWED"
        error = (err.name or "Bad Request").upper().replace(" ", "_")
        if status == 404:
            message = f"Route {request.method} {request.path} not found"
        else:
            message = err.description
        return error_response(error, message, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        _log(err, 500)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, exc=err)
