"""
Auth Module

Registration passcode, login and refresh-token rotation.
"""
from app.core.auth.passcode import PasscodeService
from app.core.auth.tokens import RefreshTokenService
from app.core.auth.service import AuthService, AuthResult, Registration

__all__ = [
    "PasscodeService",
    "RefreshTokenService",
    "AuthService",
    "AuthResult",
    "Registration",
]
