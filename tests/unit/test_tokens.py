"""Unit tests for bearer token issuing and verification."""

from datetime import timedelta

import pytest
from libs.auth.passwords import hash_password, verify_password
from libs.auth.tokens import TokenService, TokenStatus
from libs.common.errors import AuthError


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("unit-test-secret", expires_minutes=5)


@pytest.mark.unit
def test_issued_token_round_trips_username(tokens):
    token = tokens.issue("alice")
    assert token
    assert tokens.validate(token) == TokenStatus.OK

    user = tokens.verify(token)
    assert user.username == "alice"
    assert (user.expires_at - user.issued_at).total_seconds() == 5 * 60


@pytest.mark.unit
def test_expired_token(tokens):
    token = tokens.issue("alice", expires_delta=timedelta(seconds=-30))
    assert tokens.validate(token) == TokenStatus.EXPIRED
    with pytest.raises(AuthError, match="Token expired"):
        tokens.verify(token)


@pytest.mark.unit
def test_token_signed_with_other_secret_is_invalid(tokens):
    foreign = TokenService("another-secret").issue("alice")
    assert tokens.validate(foreign) == TokenStatus.INVALID
    with pytest.raises(AuthError, match="Invalid token"):
        tokens.verify(foreign)


@pytest.mark.unit
def test_garbage_token_is_invalid(tokens):
    assert tokens.validate("not.a.token") == TokenStatus.INVALID


@pytest.mark.unit
def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenService("")


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_password_hash_verifies():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


@pytest.mark.unit
def test_unrecognised_hash_fails_closed():
    assert not verify_password("s3cret", "plain-text-not-a-hash")
