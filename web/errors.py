"""JSON error responses."""

from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from core.exceptions import ApplicationError, RateLimitError


def _error_response(payload: dict, status: int):
    response = jsonify(payload)
    response.status_code = status
    return response


def register_error_handlers(app: Flask) -> None:
    """Map application and HTTP errors to ``{"error": ..., "code": ...}``.

    Args:
        app: Flask application instance
    """
    @app.errorhandler(ApplicationError)
    def application_error(error: ApplicationError):
        if error.http_status >= 500:
            app.logger.error("%s: %s", error.code, error.message)
        response = _error_response(error.to_dict(), error.http_status)
        if isinstance(error, RateLimitError):
            response.headers["Retry-After"] = str(error.retry_after)
        return response

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return _error_response({"error": "Endpoint not found", "code": "NOT_FOUND"}, 404)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        code = (error.name or "HTTP_ERROR").upper().replace(" ", "_")
        return _error_response({"error": error.description, "code": code}, error.code or 500)

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        """Handle unexpected errors."""
        app.logger.error("Internal server error: %s", error, exc_info=error)
        return _error_response({"error": "Something went wrong!", "code": "INTERNAL_ERROR"}, 500)
