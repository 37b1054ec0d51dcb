# dancebook/identity.py

import logging
from collections import namedtuple
from functools import wraps

from flask import current_app, g, request
from flask_login import LoginManager, current_user
from itsdangerous import BadData, URLSafeTimedSerializer

from dancebook.errors import Forbidden, Unauthenticated
from dancebook.models import ROLE_ADMIN, ROLES

logger = logging.getLogger(__name__)

Identity = namedtuple('Identity', ['user_id', 'role'])

TOKEN_SALT = 'auth-token'

login_manager = LoginManager()


class SessionGate:
    """Issues and verifies the signed, expiring token carried in the auth cookie."""

    def __init__(self, secret_key, max_age):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)

    def issue(self, user):
        return self._serializer.dumps({'user_id': user.id, 'role': user.role})

    def verify(self, token):
        if not token:
            return None
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except BadData:
            # Covers bad signatures, expired tokens and undecodable payloads
            return None
        if not isinstance(payload, dict):
            return None
        user_id = payload.get('user_id')
        role = payload.get('role')
        if not user_id or role not in ROLES:
            return None
        return Identity(user_id, role)


def get_gate():
    return SessionGate(current_app.config['SECRET_KEY'], current_app.config['AUTH_TOKEN_MAX_AGE'])


def set_auth_cookie(response, user):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        get_gate().issue(user),
        max_age=config['AUTH_TOKEN_MAX_AGE'],
        httponly=True,
        secure=config['AUTH_COOKIE_SECURE'],
        samesite=config['AUTH_COOKIE_SAMESITE'],
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


def current_identity():
    # Touch current_user so the request loader has run for this request
    if current_user.is_authenticated:
        return g.get('identity')
    return None


@login_manager.request_loader
def load_user_from_token(req):
    """Soft attach: a missing or bad token leaves the request anonymous."""
    from dancebook.utils import get_services

    token = req.cookies.get(current_app.config['AUTH_COOKIE_NAME'])
    if not token:
        return None

    identity = get_gate().verify(token)
    user = get_services().users.find_by_id(identity.user_id) if identity else None
    if user is None:
        logger.info(f"Discarding stale auth token on {req.method} {req.path}")
        g.clear_auth_cookie = True
        return None

    g.identity = identity
    return user


def login_required(f):
    """
    Decorator rejecting requests without a valid session token.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_identity() is None:
            raise Unauthenticated()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """
    Decorator for admin-only routes; the role comes from the verified token.
    """
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if current_identity().role != ROLE_ADMIN:
            logger.warning(f"Non-admin user {current_identity().user_id} denied {request.path}")
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated_function


def init_identity(app):
    login_manager.init_app(app)

    @app.after_request
    def drop_stale_auth_cookie(response):
        if g.get('clear_auth_cookie'):
            clear_auth_cookie(response)
        return response
