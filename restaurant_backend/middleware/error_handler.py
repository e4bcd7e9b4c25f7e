import traceback
import logging
from flask import jsonify, request, current_app, g
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from marshmallow import ValidationError

from restaurant_backend import db
from restaurant_backend.services.errors import ServiceError

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "Internal server error"


class ErrorHandlerMiddleware:
    """Global error handler middleware for consistent error responses.

    Every failure is answered with ``{"success": false, "message": ...}``.
    Internal details of 500-class errors are only exposed in debug mode.
    """

    def __init__(self, app):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):

        @self.app.errorhandler(ServiceError)
        def handle_service_error(e):
            return self._respond(e, e.status_code, e.message, details=e.details)

        @self.app.errorhandler(ValidationError)
        def handle_validation_error(e):
            return self._respond(e, 400, "Validation failed", errors=e.messages)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(e):
            data = getattr(e, 'data', None) or {}
            errors = data.get('messages')
            if e.code == 404 and request.url_rule is None:
                message = "Route not found"
            elif data.get('message'):
                message = data['message']
            elif errors:
                message = "Validation failed"
            else:
                message = e.description
            return self._respond(e, e.code, message, errors=errors,
                                 headers=data.get('headers'))

        @self.app.errorhandler(SQLAlchemyError)
        def handle_sqlalchemy_error(e):
            db.session.rollback()
            return self._respond(e, 500, "Database error")

        @self.app.errorhandler(Exception)
        def handle_generic_exception(e):
            return self._respond(e, 500, GENERIC_SERVER_MESSAGE)

    def _respond(self, exception, status_code, message, errors=None,
                 details=None, headers=None):
        self._log(exception, status_code, message)

        debug = current_app.debug
        if status_code >= 500 and not debug:
            message = GENERIC_SERVER_MESSAGE

        body = {"success": False, "message": message}
        if errors:
            body["errors"] = errors
        if details is not None and (status_code < 500 or debug):
            body["details"] = details
        if debug and status_code >= 500:
            body["error"] = str(exception)
            body["traceback"] = traceback.format_exc()

        response = jsonify(body)
        response.status_code = status_code
        if headers:
            response.headers.update(headers)
        return response

    def _log(self, exception, status_code, message):
        request_id = getattr(g, 'request_id', None)
        if status_code >= 500:
            logger.error(
                f"Server Error: {type(exception).__name__} - {exception}",
                extra={
                    'event': 'server_error',
                    'request_id': request_id,
                    'exception': repr(exception),
                    'traceback': traceback.format_exc()
                }
            )
        else:
            logger.warning(
                f"Client Error {status_code}: {message} ({request.method} {request.path})",
                extra={
                    'event': 'client_error',
                    'request_id': request_id,
                    'exception': repr(exception)
                }
            )


def init_error_handler(app):
    """Initialize error handler middleware"""
    return ErrorHandlerMiddleware(app)
