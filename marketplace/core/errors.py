# marketplace/core/errors.py
import logging

from flask import jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from ..extensions import db
from .exceptions import BaseAPIException, ValidationFailed

logger = logging.getLogger(__name__)


class APIError(Exception):
    def __init__(self, message, status_code=400, payload=None):
        super().__init__()
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv["error"] = "API Error"
        rv["message"] = self.message
        return rv

    def __str__(self):
        return self.message


def handle_api_error(error):
    """Handle APIError exceptions"""
    logger.error(f"API Error: {str(error)}")
    response = jsonify(error.to_dict())
    response.status_code = error.status_code
    return response


def handle_base_api_exception(error):
    """Handle the typed exceptions raised by models and decorators"""
    if error.status_code >= 500:
        logger.error(f"{error.error}: {error.message}")
    else:
        logger.warning(f"{error.error}: {error.message}")

    body = {"error": error.error, "message": error.message}
    if isinstance(error, ValidationFailed) and error.errors:
        body["errors"] = error.errors

    response = jsonify(body)
    response.status_code = error.status_code
    return response


def handle_validation_error(error):
    """Handle marshmallow ValidationError raised by schema.load"""
    logger.warning(f"Validation failed on {request.path}: {error.messages}")
    response = jsonify(
        {"error": "Validation Error", "message": "Invalid request data", "errors": error.messages}
    )
    response.status_code = 400
    return response


def handle_integrity_error(error):
    """Uniqueness and foreign key violations that slipped past explicit checks"""
    db.session.rollback()
    logger.warning(f"Integrity error on {request.path}: {error.orig}")
    response = jsonify(
        {"error": "Conflict", "message": "The request conflicts with existing data"}
    )
    response.status_code = 409
    return response


def handle_http_exception(error):
    """Render werkzeug HTTP errors (404, 405, 413, ...) as JSON"""
    if error.code == 404:
        logger.error(f"404 Error: {request.url}")
    response = jsonify({"error": error.name, "message": error.description})
    response.status_code = error.code
    return response


def handle_exception(error):
    logger.error(f"Unhandled Exception: {str(error)}", exc_info=True)
    db.session.rollback()
    response = jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"})
    response.status_code = 500
    return response


def register_error_handlers(app):
    """Register error handlers with the Flask app"""
    app.register_error_handler(APIError, handle_api_error)
    app.register_error_handler(BaseAPIException, handle_base_api_exception)
    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(IntegrityError, handle_integrity_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_exception)


def _auth_error(message, status_code=401):
    response = jsonify({"error": "Unauthorized", "message": message})
    response.status_code = status_code
    return response


def register_jwt_handlers(jwt):
    """Render Flask-JWT-Extended failures in the same shape as other API errors"""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _auth_error(reason)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _auth_error(reason)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return _auth_error("Token has expired")

    @jwt.user_lookup_error_loader
    def user_lookup_error(_jwt_header, _jwt_payload):
        return _auth_error("User not found")
