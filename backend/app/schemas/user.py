"""
Trading Simulator - Pydantic Schemas
User and Authentication Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from app.db.models.user import Role


# =========================
# Token Schemas
# =========================

class Token(BaseModel):
    """Schema for token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    username: str
    roles: list[Role]
    authenticated_as: Role

    model_config = ConfigDict(from_attributes=True)


class RefreshTokenRequest(BaseModel):
    """Schema for refresh and logout requests."""
    refresh_token: str = Field(..., min_length=1)


# =========================
# Registration / Login
# =========================

class RegisterRequest(BaseModel):
    """Schema for creating a new account."""
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., max_length=128)
    passcode: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "johndoe",
                "password": "strongpassword123",
                "passcode": "letmein",
                "email": "user@example.com",
            }
        }
    )


class RegisterResponse(BaseModel):
    user_id: int
    username: str
    roles: list[Role]

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    """Schema for JSON login."""
    username: str
    password: str
    role: str = "user"


# =========================
# User Schemas
# =========================

class UserUpdate(BaseModel):
    """Schema for updating user information."""
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    password: Optional[str] = Field(None, max_length=128)


class User(BaseModel):
    """Schema for User response (without password)."""
    id: int
    username: str
    email: Optional[str] = None
    is_active: bool = True
    roles: list[Role]
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# =========================
# Message Schemas
# =========================

class Message(BaseModel):
    """Generic message response schema."""
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str
    code: Optional[str] = None
