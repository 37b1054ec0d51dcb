# config.py

import os

ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
DATA_DIR = os.path.join(ROOT_DIR, 'data')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a_very_secret_key_for_development'

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', f"sqlite:///{os.path.join(DATA_DIR, 'dancebook.db')}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEBUG = os.environ.get('FLASK_DEBUG') == '1'

    # Signed session token carried in its own cookie
    AUTH_COOKIE_NAME = os.environ.get('AUTH_COOKIE_NAME', 'jwt')
    AUTH_TOKEN_MAX_AGE = int(os.environ.get('AUTH_TOKEN_MAX_AGE', '86400'))
    AUTH_COOKIE_SECURE = os.environ.get('AUTH_COOKIE_SECURE', '0' if DEBUG else '1') == '1'
    AUTH_COOKIE_SAMESITE = 'Strict'

    SESSION_COOKIE_SECURE = AUTH_COOKIE_SECURE
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    UPCOMING_CLASSES_LIMIT = int(os.environ.get('UPCOMING_CLASSES_LIMIT', '5'))
    DEFAULT_CLASS_CAPACITY = 20

    WTF_CSRF_ENABLED = True
