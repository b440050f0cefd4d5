from datetime import datetime, timedelta, timezone

import jwt
import pytest

from notecode_api.auth import token_codec
from notecode_api.errors import InternalError, InvalidTokenError
from tests.consts import TEST_JWT_SECRET, USER_ONE_ID


def test_issue_then_verify_returns_subject():
    token = token_codec.issue(USER_ONE_ID, TEST_JWT_SECRET, expires_in=timedelta(minutes=5))

    claims = token_codec.verify(token, TEST_JWT_SECRET)

    assert claims.subject == USER_ONE_ID
    assert claims.expires_at > datetime.now(timezone.utc)


def test_verify_rejects_wrong_secret():
    token = token_codec.issue(USER_ONE_ID, TEST_JWT_SECRET)

    with pytest.raises(InvalidTokenError):
        token_codec.verify(token, "another-secret-that-is-also-long-enough")


def test_verify_rejects_expired_token():
    token = token_codec.issue(USER_ONE_ID, TEST_JWT_SECRET, expires_in=timedelta(seconds=-10))

    with pytest.raises(InvalidTokenError, match="expired"):
        token_codec.verify(token, TEST_JWT_SECRET)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_verify_rejects_garbage(token):
    with pytest.raises(InvalidTokenError):
        token_codec.verify(token, TEST_JWT_SECRET)


def test_verify_requires_expiry():
    token = jwt.encode({"id": USER_ONE_ID}, TEST_JWT_SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        token_codec.verify(token, TEST_JWT_SECRET)


@pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": 42}, {"sub": USER_ONE_ID}])
def test_verify_requires_string_subject(payload):
    payload = dict(payload, exp=datetime.now(timezone.utc) + timedelta(minutes=5))
    token = jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        token_codec.verify(token, TEST_JWT_SECRET)


def test_verify_rejects_unsigned_token():
    payload = {"id": USER_ONE_ID, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(payload, None, algorithm="none")

    with pytest.raises(InvalidTokenError):
        token_codec.verify(token, TEST_JWT_SECRET)


@pytest.mark.parametrize("secret", [None, ""])
def test_missing_secret_is_an_internal_error(secret):
    with pytest.raises(InternalError):
        token_codec.verify("whatever", secret)
    with pytest.raises(InternalError):
        token_codec.issue(USER_ONE_ID, secret)
