from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError

from models import storage
from models.schemas.common import first_error
from services.errors import AuthServiceError, RateLimitError, INTERNAL

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_ERROR",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMITED",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Domain errors raised by services/ and utils.decorators
    @app.errorhandler(AuthServiceError)
    def handle_service_error(err: AuthServiceError):
        if err.status_code >= 500:
            current_app.logger.error("service error: %s", err.message, exc_info=err.__cause__ or err)
        response, status = error_response(err.error_code, err.message, err.status_code, details=err.detail)
        if isinstance(err, RateLimitError) and err.retry_after:
            response.headers["Retry-After"] = str(err.retry_after)
        return response, status

    # Marshmallow validation errors map to 400 with the first field message
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        if current_app and current_app.debug:
            current_app.logger.debug("validation failed: %s", err.messages)
        return error_response("VALIDATION_ERROR", first_error(err.messages), 400, details=err.messages)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "BAD_REQUEST"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        current_app.logger.exception("Unhandled exception", exc_info=err)
        storage.rollback()
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", INTERNAL, 500, details=details)
