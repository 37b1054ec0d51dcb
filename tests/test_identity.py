"""
Tests for the signed session token.
"""

from types import SimpleNamespace

import pytest

from dancebook.identity import Identity, SessionGate


@pytest.fixture
def gate():
    return SessionGate('test-secret-key', max_age=3600)


def _user(user_id='u-1', role='user'):
    return SimpleNamespace(id=user_id, role=role)


def test_issued_token_verifies(gate):
    token = gate.issue(_user(role='admin'))
    assert gate.verify(token) == Identity('u-1', 'admin')


@pytest.mark.parametrize('token', [None, '', 'garbage', 'a.b.c'])
def test_malformed_tokens_rejected(gate, token):
    assert gate.verify(token) is None


def test_tampered_token_rejected(gate):
    token = gate.issue(_user())
    tampered = token[:-2] + ('AA' if not token.endswith('AA') else 'BB')
    assert gate.verify(tampered) is None


def test_token_from_other_secret_rejected(gate):
    token = SessionGate('another-secret', max_age=3600).issue(_user())
    assert gate.verify(token) is None


def test_expired_token_rejected():
    token = SessionGate('test-secret-key', max_age=3600).issue(_user())
    assert SessionGate('test-secret-key', max_age=-1).verify(token) is None


def test_unknown_role_rejected(gate):
    token = gate.issue(_user(role='superuser'))
    assert gate.verify(token) is None
