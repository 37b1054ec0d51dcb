# dancebook/errors.py

import logging
from urllib.parse import urlparse

from flask import jsonify, render_template, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

JSON_PATH_PREFIXES = ('/api/', '/courses/api/')


class BookingAppError(Exception):
    """Base class for errors reported to the caller with a fixed status code."""

    status_code = 500
    message = 'Something went wrong'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFound(BookingAppError):
    status_code = 404
    message = 'The page you are looking for does not exist'


class DuplicateEmail(BookingAppError):
    status_code = 400
    message = 'Email already in use'


class DuplicateBooking(BookingAppError):
    status_code = 400
    message = 'You have already booked this class'


class ClassFull(BookingAppError):
    status_code = 400
    message = 'This class is fully booked'


class Unauthenticated(BookingAppError):
    status_code = 401
    message = 'Please log in to access this page'


class Forbidden(BookingAppError):
    status_code = 403
    message = 'You do not have permission to access this page'


class ValidationFailed(BookingAppError):
    status_code = 400
    message = 'Please correct the errors below'

    def __init__(self, errors, message=None):
        self.errors = dict(errors)
        super().__init__(message)


class StoreFailure(BookingAppError):
    """Underlying persistence error. Detail is logged, never shown."""

    status_code = 500
    message = 'Something went wrong'


def _wants_json():
    if request.path.startswith(JSON_PATH_PREFIXES) or request.is_json:
        return True
    best = request.accept_mimetypes.best_match(['application/json', 'text/html'])
    return best == 'application/json' and request.accept_mimetypes[best] > request.accept_mimetypes['text/html']


def _login_redirect_path():
    # Only a GET can be replayed after login
    if request.method == 'GET':
        return request.full_path.rstrip('?')
    if request.referrer:
        referrer = urlparse(request.referrer)
        if referrer.netloc == request.host:
            return referrer.path + (f'?{referrer.query}' if referrer.query else '')
    return ''


def _render_error(status_code, message, errors=None):
    if _wants_json():
        body = {'success': False, 'message': message}
        if errors:
            body['errors'] = errors
        return jsonify(body), status_code

    if status_code == 401:
        return render_template('auth/login.html', form=None, error=message, redirect_url=_login_redirect_path()), 401
    if status_code == 404:
        return render_template('404.html', title='Page Not Found', message=message), 404
    if status_code == 403:
        return render_template('403.html', title='Access Denied', message=message), 403
    return render_template('error.html', title='Error', message=message, errors=errors or {}), status_code


def register_error_handlers(app):
    @app.errorhandler(BookingAppError)
    def handle_booking_app_error(error):
        if isinstance(error, StoreFailure):
            logger.error(f"Store failure on {request.method} {request.path}: {error.__cause__!r}")
        else:
            logger.info(f"{type(error).__name__} on {request.method} {request.path}: {error.message}")
        return _render_error(error.status_code, error.message, getattr(error, 'errors', None))

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        if error.code is None or error.code < 400:
            return error
        return _render_error(error.code, error.description)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return _render_error(500, BookingAppError.message)
