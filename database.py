# database.py

import logging
import os

from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

# Initialize SQLAlchemy without an app yet. We will init_app later.
db = SQLAlchemy()


def init_db(app):
    """
    Binds the shared SQLAlchemy handle to the app and creates any missing tables.
    For file-backed SQLite the parent directory is created first.
    """
    db.init_app(app)

    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if uri.startswith('sqlite:///') and uri != 'sqlite:///:memory:':
        db_dir = os.path.dirname(uri[len('sqlite:///'):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    with app.app_context():
        # Import models here to ensure they're registered before table creation
        from dancebook import models  # noqa: F401
        logger.info(f"Ensuring tables at {uri}...")
        db.create_all()
        logger.info("Tables ensured.")


def close_db_session(exception=None):
    """
    Removes the scoped session after each request.
    Registered as a teardown function for the Flask app.
    """
    if exception is not None:
        logger.error(f"Request ended with error, rolling back: {type(exception).__name__}")
        db.session.rollback()
    db.session.remove()
