"""
Error taxonomy and the handlers that turn errors into the standard
``{"success": false, "error": ...}`` envelope.
"""
import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors reported to the caller"""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, status_code=None, **extra):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self):
        payload = {'success': False, 'error': self.message}
        payload.update({k: v for k, v in self.extra.items() if v is not None})
        return payload


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request'

    def __init__(self, message=None, fields=None):
        super().__init__(message, fields=fields)
        self.fields = fields or {}


class AuthenticationError(ApiError):
    status_code = 401
    default_message = 'Authentication required'


class MembershipNotApprovedError(ApiError):
    status_code = 403
    default_message = 'VIP membership not approved'

    def __init__(self, message=None, member_status=None):
        super().__init__(message, member_status=member_status)
        self.member_status = member_status


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


class IdentifierAllocationError(ApiError):
    status_code = 409
    default_message = 'Could not allocate identifier, please try again'


class FileTooLargeError(ApiError):
    status_code = 413
    default_message = 'File too large'


class FileTypeError(ApiError):
    status_code = 415
    default_message = 'File type not allowed'


class StorageUnavailableError(ApiError):
    status_code = 503
    default_message = 'File storage is temporarily unavailable, please retry'


def register_error_handlers(app):
    """Convert every error raised by a handler into the JSON envelope."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error('%s %s failed: %s', request.method, request.path, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(413)
    def handle_request_too_large(error):
        # Whole-request limit; the per-file limit is reported by FileTooLargeError
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return jsonify({
            'success': False,
            'error': 'Request too large. The whole upload may not exceed {}MB.'.format(limit_mb),
        }), 413

    @app.errorhandler(429)
    def handle_rate_limit(error):
        return jsonify({
            'success': False,
            'error': 'Too many requests. Please try again later.',
        }), 429

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        from printshop import db
        db.session.rollback()
        logger.exception('Database error on %s %s', request.method, request.path)
        return jsonify({
            'success': False,
            'error': 'Service temporarily unavailable',
        }), 503

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        from printshop import db
        db.session.rollback()
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'success': False, 'error': 'Internal server error'}), 500
