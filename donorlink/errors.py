"""Typed failures raised by the services and their JSON error responses"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class DonorLinkError(Exception):
    status_code = 400
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(DonorLinkError):
    """Invalid input"""
    status_code = 400


class NotFoundError(DonorLinkError):
    """Resource not found"""
    status_code = 404


class PermissionDeniedError(DonorLinkError):
    """You are not allowed to perform this action"""
    status_code = 403


class ConflictError(DonorLinkError):
    """Operation not allowed in the current state"""
    status_code = 409


class StoreError(DonorLinkError):
    """The database is temporarily unavailable, please try again"""
    status_code = 503
    retryable = True


def register_error_handlers(app):
    @app.errorhandler(StoreError)
    def handle_store_error(e):
        app.logger.error('Store failure: %s', e.message, exc_info=e.__cause__ or e)
        return jsonify({'error': StoreError.__doc__, 'retryable': True}), e.status_code

    @app.errorhandler(DonorLinkError)
    def handle_domain_error(e):
        app.logger.info('%s: %s', e.__class__.__name__, e.message)
        return jsonify({'error': e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception('Unhandled error')
        return jsonify({'error': 'An unexpected error occurred'}), 500
