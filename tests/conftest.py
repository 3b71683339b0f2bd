"""
Pytest configuration and fixtures.
"""
import sys
import os
import shutil
import tempfile

import pytest
from flask import has_app_context

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + '/..'))

from config import Config


class TestConfig(Config):
    TESTING = True
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SERVER_NAME = 'localhost.localdomain'
    UPLOAD_FOLDER = tempfile.mkdtemp(prefix='basma-uploads-')
    CACHE_TYPE = 'SimpleCache'
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = 'noreply@basma.test'
    CONTACT_RECIPIENT = 'contact@basma.test'
    PRESERVE_CONTEXT_ON_EXCEPTION = False


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    from basma import create_app

    app = create_app(TestConfig)

    # Initialize database
    with app.app_context():
        from basma import db
        db.session.configure(expire_on_commit=False)
        db.create_all()

    return app


@pytest.fixture(scope='session', autouse=True)
def cleanup_test_artifacts():
    """Cleanup temporary files after the test session."""
    yield
    os.close(TestConfig.db_fd)
    for path in (TestConfig.db_path,):
        try:
            os.remove(path)
        except OSError:
            pass
    shutil.rmtree(TestConfig.UPLOAD_FOLDER, ignore_errors=True)


@pytest.fixture(scope='function', autouse=True)
def clean_db(app):
    """Clean database and cache between tests."""
    with app.app_context():
        from basma import db, cache
        # Drop all tables and recreate them to ensure a clean slate
        db.drop_all()
        db.create_all()
        cache.clear()
    yield


@pytest.fixture(scope='function')
def ctx(app):
    """An application context held open for the whole test (service-level tests)."""
    with app.app_context():
        yield app
        from basma import db
        db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def make_member(app):
    """
    Factory for members with a role and committees.

    Uses the current app context when one is open, otherwise a short-lived one.
    """
    from basma import db
    from basma.models import Member, RoleAssignment, CommitteeMembership
    from basma.constants import Role

    counter = {'n': 0}

    def _create(full_name=None, role=Role.MEMBER, committee=None, extra_committees=(),
                status='active', password='password123', email=None):
        counter['n'] += 1
        full_name = full_name or f"Member {counter['n']}"
        email = email or f"member{counter['n']}@basma.test"

        member = Member(full_name=full_name, email=email, committee=committee, status=status)
        member.set_password(password)
        member.role_assignment = RoleAssignment(role=role)
        for name in extra_committees:
            member.committee_memberships.append(CommitteeMembership(committee=name))
        db.session.add(member)
        db.session.commit()
        db.session.refresh(member)
        return member

    def factory(*args, **kwargs):
        if has_app_context():
            return _create(*args, **kwargs)
        with app.app_context():
            return _create(*args, **kwargs)

    return factory


class AuthActions:
    def __init__(self, client):
        self._client = client

    def login(self, email, password='password123'):
        return self._client.post('/login', data={'email': email, 'password': password})

    def logout(self):
        return self._client.post('/logout')


@pytest.fixture
def auth(client):
    return AuthActions(client)
