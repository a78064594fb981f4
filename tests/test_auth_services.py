"""Tests for password hashing and JWT services."""

import time

import jwt
import pytest

from vent.auth import (
    Claims,
    CredentialAuthenticator,
    CredentialGenerator,
    JWTService,
    PasswordService,
    TokenAuthenticator,
    TokenGenerator,
)
from vent.core.errors import (
    AuthenticationError,
    InvalidTokenError,
    PasswordMismatchError,
    TokenExpiredError,
)

SECRET = "test-secret-key-that-is-long-enough"


@pytest.fixture(scope="module")
def passwords():
    return PasswordService(rounds=4)


@pytest.fixture
def tokens():
    return JWTService(SECRET, ttl=60)


# ── PasswordService ──────────────────────────────────────────────────────────


class TestPasswordService:
    def test_satisfies_protocols(self, passwords):
        assert isinstance(passwords, CredentialGenerator)
        assert isinstance(passwords, CredentialAuthenticator)

    def test_hash_differs_from_password(self, passwords):
        hashed = passwords.generate("secret")
        assert hashed != "secret"
        assert hashed.startswith("$2")

    def test_hashes_are_salted(self, passwords):
        assert passwords.generate("secret") != passwords.generate("secret")

    def test_verify(self, passwords):
        hashed = passwords.generate("secret")
        assert passwords.verify("secret", hashed)
        assert not passwords.verify("wrong", hashed)

    def test_verify_malformed_hash(self, passwords):
        assert not passwords.verify("secret", "not-a-hash")

    def test_authenticate(self, passwords):
        hashed = passwords.generate("secret")
        passwords.authenticate("secret", hashed)
        with pytest.raises(PasswordMismatchError):
            passwords.authenticate("wrong", hashed)


# ── JWTService ───────────────────────────────────────────────────────────────


class TestJWTService:
    def test_satisfies_protocols(self, tokens):
        assert isinstance(tokens, TokenGenerator)
        assert isinstance(tokens, TokenAuthenticator)

    def test_round_trip(self, tokens):
        claims = tokens.new_claims(42)
        decoded = tokens.authenticate(tokens.generate(claims))
        assert decoded.subject == "42"
        assert decoded.user_id == 42
        assert decoded.expires_at == claims.expires_at

    def test_new_claims_use_ttl(self, tokens):
        claims = tokens.new_claims(1)
        assert claims.expires_at - claims.issued_at == 60

    def test_expired(self, tokens):
        now = int(time.time())
        token = tokens.generate(Claims(subject="1", issued_at=now - 120, expires_at=now - 60))
        with pytest.raises(TokenExpiredError):
            tokens.authenticate(token)

    def test_wrong_secret(self, tokens):
        token = JWTService("another-secret-key-that-is-long-enough").generate(tokens.new_claims(1))
        with pytest.raises(InvalidTokenError):
            tokens.authenticate(token)

    def test_garbage(self, tokens):
        with pytest.raises(InvalidTokenError):
            tokens.authenticate("not.a.token")

    def test_missing_subject(self, tokens):
        token = jwt.encode({"exp": int(time.time()) + 60}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            tokens.authenticate(token)

    def test_errors_are_authentication_errors(self):
        assert issubclass(TokenExpiredError, AuthenticationError)
        assert issubclass(InvalidTokenError, AuthenticationError)


def test_claims_user_id_must_be_integer():
    with pytest.raises(ValueError):
        Claims(subject="abc").user_id
