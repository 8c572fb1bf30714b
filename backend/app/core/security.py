"""
Trading Simulator - Security Module
JWT access tokens, opaque refresh tokens, password hashing
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import re
import secrets
import uuid

import bcrypt
from jose import jwt, JWTError

from app.config import settings


# bcrypt only reads the first 72 bytes
BCRYPT_MAX_BYTES = 72

PASSWORD_RULE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,128}$")


def _secret_bytes(value: str) -> bytes:
    return value.encode("utf-8")[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(_secret_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password string
    """
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(_secret_bytes(password), salt).decode("utf-8")


def is_strong_password(password: Optional[str]) -> bool:
    """8-128 characters with at least one letter and one digit."""
    return bool(password) and PASSWORD_RULE.match(password) is not None


def create_access_token(
    subject: str | Any,
    role: str = "user",
    expires_delta: Optional[timedelta] = None,
    jti: Optional[str] = None
) -> tuple[str, str]:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (the user id)
        role: Role the user authenticated as
        expires_delta: Optional custom expiration time
        jti: Optional JWT ID (auto-generated if not provided)

    Returns:
        Tuple of (encoded JWT token string, jti)
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    token_jti = jti or str(uuid.uuid4())

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "iat": now,
        "type": "access",
        "role": role,
        "jti": token_jti,
    }

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt, token_jti


def generate_refresh_token() -> str:
    """512 random bits, URL-safe base64 without padding."""
    return secrets.token_urlsafe(64)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded token payload as dict, or None if invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def get_token_claims(token: str, token_type: str = "access") -> Optional[dict]:
    """
    Return the payload of a valid token of the expected type.

    Args:
        token: The JWT token string to verify
        token_type: Expected "type" claim

    Returns:
        Claims dict, or None if the token is invalid, expired, or of another type
    """
    if not token:
        return None

    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type") != token_type:
        return None

    if payload.get("sub") is None:
        return None

    return payload


def verify_token(token: str, token_type: str = "access") -> Optional[str]:
    """Verify a JWT token and return its subject, or None."""
    payload = get_token_claims(token, token_type)
    return payload.get("sub") if payload else None
