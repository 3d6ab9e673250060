# kangagam/errors.py
import logging
import traceback

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class PermissionDenied(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


def register_error_handlers(app):
    """Ubah exception menjadi respons JSON {message}"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify({'message': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.error(f"Kesalahan tak terduga: {error}", exc_info=error)
        production = app.config.get('APP_ENV') == 'production'
        return jsonify({
            'message': str(error) or 'Terjadi kesalahan pada server.',
            'stack': None if production else ''.join(
                traceback.format_exception(type(error), error, error.__traceback__))
        }), 500
