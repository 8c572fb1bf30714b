"""
Trading Simulator - Authentication Endpoints
"""
from fastapi import APIRouter, Depends, Form, status
from fastapi.security import OAuth2PasswordRequestForm

from app.core.auth import AuthService
from app.dependencies import get_auth_service, get_current_active_user
from app.db.models.user import User
from app.schemas.user import (
    LoginRequest,
    Message,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    Token,
    User as UserSchema,
)

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create an account. Requires the registration passcode."
)
async def register(
    data: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Register a new user.

    - **username**: 3-50 chars, unique
    - **password**: 8-128 chars with a letter and a digit
    - **passcode**: registration passcode
    - **email**: optional, unique
    """
    registration = await auth.register(
        username=data.username,
        password=data.password,
        passcode=data.passcode,
        email=data.email,
    )
    return RegisterResponse.model_validate(registration)


@router.post(
    "/login",
    response_model=Token,
    summary="Login and get access token",
    description="OAuth2 form login. Pass `role=admin` to act as admin."
)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    role: str = Form("user"),
    auth: AuthService = Depends(get_auth_service),
) -> Token:
    result = await auth.login(form_data.username, form_data.password, role)
    return Token.model_validate(result)


@router.post(
    "/login/json",
    response_model=Token,
    summary="Login with JSON body",
)
async def login_json(
    credentials: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Token:
    result = await auth.login(credentials.username, credentials.password, credentials.role)
    return Token.model_validate(result)


@router.post("/refresh", response_model=Token, summary="Refresh access token")
async def refresh_token(
    data: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Token:
    """Exchange a refresh token for a new access token. The refresh token may rotate."""
    result = await auth.refresh(data.refresh_token)
    return Token.model_validate(result)


@router.post("/logout", response_model=Message, summary="Logout")
async def logout(
    data: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Message:
    await auth.logout(data.refresh_token)
    return Message(message="Successfully logged out")


@router.get("/me", response_model=UserSchema, summary="Get current user")
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
) -> UserSchema:
    return UserSchema.model_validate(current_user)
