"""
Unit tests for identity provider token verification.
"""

from datetime import datetime, timedelta, timezone

import jwt
from fairway.services import auth_service


def _token(payload, secret=None):
    return jwt.encode(payload, secret or auth_service.JWT_SECRET_KEY, algorithm=auth_service.JWT_ALGORITHM)


def test_verify_token_user_id_claim():
    """The user_id claim is returned as an int."""
    payload = auth_service.verify_token(_token({"user_id": "42"}))
    assert payload["user_id"] == 42


def test_verify_token_sub_claim():
    """The standard sub claim is accepted when user_id is absent."""
    payload = auth_service.verify_token(_token({"sub": "17"}))
    assert payload["user_id"] == 17


def test_verify_token_wrong_secret():
    """Tokens signed with another secret are rejected."""
    assert auth_service.verify_token(_token({"user_id": 1}, secret="not-the-secret")) is None


def test_verify_token_expired():
    """Expired tokens are rejected."""
    expired = datetime.now(timezone.utc) - timedelta(minutes=5)
    assert auth_service.verify_token(_token({"user_id": 1, "exp": expired})) is None


def test_verify_token_without_user():
    """Tokens without a usable user id are rejected."""
    assert auth_service.verify_token(_token({"role": "admin"})) is None
    assert auth_service.verify_token(_token({"user_id": "abc"})) is None


def test_verify_token_garbage():
    """Malformed tokens are rejected."""
    assert auth_service.verify_token("not-a-jwt") is None
