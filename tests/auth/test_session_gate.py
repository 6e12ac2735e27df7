from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.client_records.client_records.auth.gate import SessionGate
from src.client_records.client_records.auth.policy import AccessPolicy
from src.client_records.client_records.core.constants import SESSION_AUTH_KEY
from src.client_records.client_records.core.exceptions import AuthenticationError


def test_plain_password_policy():
    policy = AccessPolicy(password="s3cret")

    assert policy.is_configured
    assert policy.verify("s3cret") is True
    assert policy.verify("S3CRET") is False
    assert policy.verify("") is False


def test_hashed_password_wins_over_plain():
    policy = AccessPolicy(password="plain", password_hash=generate_password_hash("hashed"))

    assert policy.verify("hashed") is True
    assert policy.verify("plain") is False


def test_unusable_hash_rejects_everything():
    assert AccessPolicy(password_hash="CHANGE_ME").verify("CHANGE_ME") is False


def test_unconfigured_policy_rejects_everything():
    policy = AccessPolicy()

    assert not policy.is_configured
    assert policy.verify("anything") is False


def test_login_marks_session_authenticated():
    gate = SessionGate(AccessPolicy(password="pw"))
    sess = {"stale": "value"}

    gate.login(sess, "pw")

    assert sess == {SESSION_AUTH_KEY: True}
    assert gate.is_authenticated(sess)


def test_failed_login_leaves_session_untouched():
    gate = SessionGate(AccessPolicy(password="pw"))
    sess = {}

    with pytest.raises(AuthenticationError):
        gate.login(sess, "wrong")

    assert not gate.is_authenticated(sess)


def test_logout_clears_session():
    gate = SessionGate(AccessPolicy(password="pw"))
    sess = {}
    gate.login(sess, "pw")

    gate.logout(sess)

    assert sess == {}
    assert not gate.is_authenticated(sess)
