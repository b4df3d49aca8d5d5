"""
Unit tests for security utilities.

Tests password hashing, JWT generation, and token validation.
"""

import pytest
from datetime import datetime, timedelta, timezone

from jose import JWTError

from authsvc.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    is_password_hashed,
    remaining_ttl,
    verify_password,
)


@pytest.mark.unit
class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password(self):
        """Test password hashing."""
        password = "TestPassword123!"
        hashed = hash_password(password)

        assert hashed != password
        assert len(hashed) > 50
        assert hashed.startswith("$2b$")

    def test_verify_password_success(self):
        password = "TestPassword123!"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True

    def test_verify_password_failure(self):
        hashed = hash_password("TestPassword123!")

        assert verify_password("WrongPassword123!", hashed) is False

    def test_verify_against_plaintext_returns_false(self):
        """A stored value that is not a hash never verifies."""
        assert verify_password("secret", "secret") is False

    def test_different_hashes_for_same_password(self):
        """Test that hashing same password twice produces different hashes (salt)."""
        password = "TestPassword123!"
        hash1 = hash_password(password)
        hash2 = hash_password(password)

        assert hash1 != hash2
        assert verify_password(password, hash1) is True
        assert verify_password(password, hash2) is True

    def test_is_password_hashed(self):
        assert is_password_hashed(hash_password("abc12345")) is True
        assert is_password_hashed("abc12345") is False


@pytest.mark.unit
class TestJWTTokens:
    """Test JWT token generation and validation."""

    def test_create_access_token(self):
        token = create_access_token(subject=42, tenant_id=7)

        payload = decode_token(token)
        assert payload["sub"] == "42"
        assert payload["tenant_id"] == 7
        assert payload["type"] == "access"

    def test_create_refresh_token(self):
        token = create_refresh_token(subject=42, tenant_id=7)

        payload = decode_token(token)
        assert payload["sub"] == "42"
        assert payload["tenant_id"] == 7
        assert payload["type"] == "refresh"

    def test_extra_claims(self):
        """Extra claims are merged but cannot override the standard ones."""
        token = create_access_token(
            subject=1,
            extra_claims={"username": "alice", "type": "refresh"},
        )
        payload = decode_token(token)

        assert payload["username"] == "alice"
        assert payload["type"] == "access"

    def test_token_expiration(self):
        payload = decode_token(create_access_token(subject=1))

        assert "exp" in payload
        assert "iat" in payload

        exp_time = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        assert exp_time > datetime.now(timezone.utc)

    def test_decode_invalid_token(self):
        with pytest.raises(JWTError):
            decode_token("invalid.token.here")

    def test_decode_expired_token(self):
        token = create_access_token(subject=1, expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_token(token)

    def test_custom_expiration(self):
        token = create_access_token(subject=1, expires_delta=timedelta(minutes=5))

        payload = decode_token(token)
        duration = payload["exp"] - payload["iat"]
        assert 4 * 60 <= duration <= 6 * 60

    def test_each_token_has_unique_id(self):
        first = decode_token(create_access_token(subject=1))
        second = decode_token(create_access_token(subject=1))

        assert len(first["jti"]) == 32
        assert first["jti"] != second["jti"]

    def test_remaining_ttl(self):
        payload = decode_token(create_access_token(subject=1, expires_delta=timedelta(minutes=10)))

        assert 9 * 60 <= remaining_ttl(payload) <= 10 * 60

    def test_remaining_ttl_never_negative(self):
        past = int((datetime.now(timezone.utc) - timedelta(minutes=1)).timestamp())

        assert remaining_ttl({"exp": past}) == 0
