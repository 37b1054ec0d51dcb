"""
Pytest configuration and fixtures for the dance booking tests.
"""

import sys
from contextlib import contextmanager
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config
from database import db
from dancebook import create_app
from dancebook.utils import build_services


# =============================================================================
# Test Settings
# =============================================================================

def make_test_config(db_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = 'test-secret-key'
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_path}"
        WTF_CSRF_ENABLED = False
        AUTH_COOKIE_SECURE = False
        SESSION_COOKIE_SECURE = False
        AUTH_TOKEN_MAX_AGE = 3600

    return TestConfig


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(tmp_path):
    """Fresh application on its own temp-file SQLite database."""
    app = create_app(make_test_config(tmp_path / 'test.db'))
    yield app
    with app.app_context():
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    """Stores and workflow bound to one session, for tests that do not go through HTTP."""
    with app.app_context():
        yield build_services(db.session)


@pytest.fixture
def stores(app):
    """
    Context manager giving short-lived services, for HTTP tests that need to set up
    or inspect data around requests. Read what you need before the block ends.
    """
    @contextmanager
    def _stores():
        with app.app_context():
            yield build_services(db.session)

    return _stores


# =============================================================================
# Data helpers
# =============================================================================

def tomorrow():
    return date.today() + timedelta(days=1)


@pytest.fixture
def make_user():
    def _make_user(services, name='Ada', email='ada@example.com', password='password123', as_admin=False):
        return services.users.create(name, email, password, as_admin=as_admin)

    return _make_user


@pytest.fixture
def make_class():
    def _make_class(services, capacity=20, course_title='Ballet', class_date=None, start_time='18:00'):
        course = services.catalog.find_all_courses()
        course = next((c for c in course if c.title == course_title), None)
        if course is None:
            course = services.catalog.create_course(course_title, f'{course_title} for everyone', 'beginner')
        return services.catalog.create_class(
            course_id=course.id,
            title=f'{course_title} class',
            date=class_date or tomorrow(),
            start_time=start_time,
            end_time='19:30',
            capacity=capacity,
            instructor='Maria',
            location='Studio 1',
        )

    return _make_class


@pytest.fixture
def login(client):
    def _login(email='ada@example.com', password='password123'):
        return client.post('/login', data={'email': email, 'password': password})

    return _login
