"""Credential Capabilities — bcrypt digests and signed bearer tokens."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from app.config import get_settings
from app.core.errors import AuthenticationError
from app.services.security import (
    hash_password, issue_token, verify_password, verify_token,
)


def test_hash_is_not_plaintext_and_verifies():
    digest = hash_password("hunter2")
    assert digest != "hunter2"
    assert verify_password("hunter2", digest)
    assert not verify_password("hunter3", digest)


def test_verify_rejects_empty_or_foreign_digest():
    assert not verify_password("x", "")
    assert not verify_password("x", "not-a-bcrypt-digest")


def test_token_round_trips_user_id():
    user_id = uuid4()
    assert verify_token(issue_token(user_id)) == user_id


def test_token_carries_only_sub_and_exp():
    settings = get_settings()
    claims = jwt.decode(
        issue_token(uuid4()), settings.jwt_secret, algorithms=[settings.jwt_algorithm],
    )
    assert set(claims) == {"sub", "exp"}


def test_expired_token_is_rejected():
    token = issue_token(uuid4(), expires_delta=timedelta(seconds=-10))
    with pytest.raises(AuthenticationError, match="Token expired"):
        verify_token(token)


def test_wrong_signature_is_rejected():
    token = jwt.encode({"sub": str(uuid4())}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError, match="Invalid token"):
        verify_token(token)


def test_malformed_subject_is_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "not-a-uuid"}, settings.jwt_secret, algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(AuthenticationError):
        verify_token(token)
