import logging
import time
import uuid
from datetime import datetime

from flask import request, g, current_app

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = {
    'password', 'token', 'secret', 'authorization', 'credential',
    'api_key', 'access_token', 'refresh_token', 'jwt', 'session', 'cookie'
}

SENSITIVE_HEADERS = {
    'authorization', 'cookie', 'x-api-key', 'x-auth-token', 'x-access-token'
}


def sanitize_data(data):
    """Redact sensitive values from request/response payloads."""
    if isinstance(data, list):
        return [sanitize_data(item) for item in data]
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = '***REDACTED***'
        else:
            sanitized[key] = sanitize_data(value)
    return sanitized


def sanitize_headers(headers):
    return {
        key: '***REDACTED***' if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


class RequestLoggerMiddleware:
    """Middleware for logging request and response details"""

    def __init__(self, app):
        self.app = app
        self.register_middleware()

    def register_middleware(self):

        @self.app.before_request
        def before_request():
            g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
            g.start_time = time.time()

            logger.info(
                f"Request Started - ID: {g.request_id} {request.method} {request.path}",
                extra={
                    'request_id': g.request_id,
                    'event': 'request_started',
                    'request_data': self._get_request_data()
                }
            )

        @self.app.after_request
        def after_request(response):
            request_id = getattr(g, 'request_id', None) or str(uuid.uuid4())
            processing_time = time.time() - getattr(g, 'start_time', time.time())

            logger.log(
                self._get_log_level(response.status_code),
                f"Request Completed - ID: {request_id} - Status: {response.status_code} - Time: {processing_time:.3f}s",
                extra={
                    'request_id': request_id,
                    'event': 'request_completed',
                    'processing_time': processing_time,
                    'response_data': self._get_response_data(response)
                }
            )

            response.headers['X-Request-ID'] = request_id
            response.headers['X-Processing-Time'] = f"{processing_time:.3f}s"
            return response

    def _get_request_data(self):
        request_data = {
            'method': request.method,
            'path': request.path,
            'endpoint': request.endpoint,
            'remote_addr': request.remote_addr,
            'user_agent': request.headers.get('User-Agent'),
            'headers': sanitize_headers(dict(request.headers)),
            'timestamp': datetime.utcnow().isoformat()
        }

        if request.args:
            request_data['query_params'] = sanitize_data(dict(request.args))

        if request.is_json:
            body = request.get_json(silent=True)
            request_data['body'] = sanitize_data(body) if body is not None else 'Invalid JSON'

        return request_data

    def _get_response_data(self, response):
        response_data = {
            'status_code': response.status_code,
            'content_type': response.content_type,
            'content_length': response.content_length,
            'timestamp': datetime.utcnow().isoformat()
        }

        # Bodies are only worth keeping for failures or while debugging
        if response.status_code >= 400 or current_app.debug:
            if response.is_json:
                response_data['body'] = sanitize_data(response.get_json(silent=True))
            elif not response.direct_passthrough:
                response_data['body'] = response.get_data(as_text=True)[:1000]

        return response_data

    def _get_log_level(self, status_code):
        if status_code >= 500:
            return logging.ERROR
        elif status_code >= 400:
            return logging.WARNING
        return logging.INFO


def init_request_logger(app):
    """Initialize request logger middleware"""
    return RequestLoggerMiddleware(app)
