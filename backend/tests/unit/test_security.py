"""
Unit Tests - Security
Password hashing, password rules and JWT handling.
"""
from datetime import timedelta
import pytest
from jose import jwt

from app.config import settings
from app.core.security import (
    create_access_token,
    decode_token,
    generate_refresh_token,
    get_password_hash,
    get_token_claims,
    is_strong_password,
    verify_password,
    verify_token,
)


class TestPasswordHashing:
    """Tests for bcrypt helpers."""

    def test_hash_and_verify(self):
        hashed = get_password_hash("Password123")

        assert hashed != "Password123"
        assert verify_password("Password123", hashed)
        assert not verify_password("Password124", hashed)

    def test_hashes_are_salted(self):
        assert get_password_hash("Password123") != get_password_hash("Password123")

    def test_malformed_hash(self):
        assert verify_password("Password123", "not-a-bcrypt-hash") is False

    def test_long_password_truncated_consistently(self):
        long_password = "a1" * 60
        assert verify_password(long_password, get_password_hash(long_password))


class TestPasswordRules:
    """Tests for password strength."""

    @pytest.mark.parametrize("password", ["Password123", "abcdefg1", "1234567a", "x" * 127 + "1"])
    def test_strong(self, password):
        assert is_strong_password(password)

    @pytest.mark.parametrize("password", [None, "", "short1", "abcdefgh", "12345678", "a1" * 65])
    def test_weak(self, password):
        assert not is_strong_password(password)


class TestAccessTokens:
    """Tests for JWT access tokens."""

    def test_claims(self):
        token, jti = create_access_token(7, role="admin")
        claims = decode_token(token)

        assert claims["sub"] == "7"
        assert claims["role"] == "admin"
        assert claims["type"] == "access"
        assert claims["jti"] == jti
        assert verify_token(token) == "7"

    def test_expired_token_rejected(self):
        token, _ = create_access_token(7, expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None
        assert verify_token(token) is None

    def test_wrong_type_rejected(self):
        token, _ = create_access_token(7)
        assert get_token_claims(token, token_type="refresh") is None

    def test_wrong_signature_rejected(self):
        token = jwt.encode({"sub": "7", "type": "access"}, "other-secret", algorithm=settings.JWT_ALGORITHM)
        assert verify_token(token) is None

    def test_missing_subject_rejected(self):
        token = jwt.encode({"type": "access"}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        assert get_token_claims(token) is None

    def test_empty_token(self):
        assert get_token_claims("") is None


class TestRefreshTokens:
    def test_random_and_url_safe(self):
        first, second = generate_refresh_token(), generate_refresh_token()

        assert first != second
        assert len(first) >= 86
        assert "=" not in first
        assert "+" not in first and "/" not in first
