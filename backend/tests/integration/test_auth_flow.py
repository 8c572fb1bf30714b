"""
Integration Tests - Authentication
Registration, role login, refresh rotation and logout.
"""
from datetime import datetime, timedelta
from decimal import Decimal
import pytest
import pytest_asyncio

from app.core.auth import AuthService, PasscodeService, RefreshTokenService
from app.core.security import decode_token
from app.db.models.user import Role
from app.db.repositories.wallet import WalletRepository
from app.utils.exceptions import (
    InvalidCredentialsError,
    InvalidPasscodeError,
    InvalidRefreshTokenError,
    RoleNotAssignedError,
    UserAlreadyExistsError,
    WeakPasswordError,
)
from tests.factories import TEST_PASSCODE, TEST_PASSWORD, create_passcode, create_user

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def auth(db_session):
    await create_passcode(db_session)
    return AuthService(db_session)


class TestPasscode:
    """Tests for the registration passcode."""

    @pytest.mark.asyncio
    async def test_ensure_initialized_only_once(self, db_session):
        service = PasscodeService(db_session)

        assert await service.ensure_initialized("first") is True
        assert await service.ensure_initialized("second") is False
        await service.validate("first")

    @pytest.mark.asyncio
    async def test_blank_seed_leaves_registration_closed(self, db_session):
        service = PasscodeService(db_session)

        assert await service.ensure_initialized("") is False
        with pytest.raises(InvalidPasscodeError):
            await service.validate("anything")

    @pytest.mark.asyncio
    async def test_set_passcode_replaces_active(self, db_session):
        service = PasscodeService(db_session)
        await service.set_passcode("old-code")
        await service.set_passcode("new-code")

        await service.validate("new-code")
        with pytest.raises(InvalidPasscodeError):
            await service.validate("old-code")


class TestRegister:
    """Tests for registration."""

    @pytest.mark.asyncio
    async def test_register_grants_both_roles_and_wallet(self, db_session, auth):
        registration = await auth.register(" bob ", TEST_PASSWORD, TEST_PASSCODE, email="Bob@Example.com")

        assert registration.username == "bob"
        assert registration.roles == [Role.USER, Role.ADMIN]
        wallet = await WalletRepository(db_session).get_by_user(registration.user_id)
        assert Decimal(wallet.cash_balance) == Decimal("5000.00")

    @pytest.mark.asyncio
    async def test_wrong_passcode(self, auth):
        with pytest.raises(InvalidPasscodeError):
            await auth.register("bob", TEST_PASSWORD, "guess")

    @pytest.mark.asyncio
    async def test_duplicate_username(self, auth):
        await auth.register("bob", TEST_PASSWORD, TEST_PASSCODE)
        with pytest.raises(UserAlreadyExistsError):
            await auth.register("bob", TEST_PASSWORD, TEST_PASSCODE)

    @pytest.mark.asyncio
    async def test_weak_password(self, auth):
        with pytest.raises(WeakPasswordError):
            await auth.register("bob", "password", TEST_PASSCODE)


class TestLogin:
    """Tests for login with a chosen role."""

    @pytest.mark.asyncio
    async def test_login_as_user(self, db_session, auth):
        user = await create_user(db_session, "alice")

        result = await auth.login("alice", TEST_PASSWORD)

        claims = decode_token(result.access_token)
        assert claims["sub"] == str(user.id)
        assert claims["role"] == "user"
        assert result.authenticated_as == Role.USER
        assert result.roles == [Role.USER]
        assert result.token_type == "bearer"
        assert result.refresh_token
        assert user.last_login is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["admin", "ADMIN", "ROLE_ADMIN"])
    async def test_admin_login(self, db_session, auth, role):
        await create_user(db_session, "root", is_superuser=True)

        result = await auth.login("root", TEST_PASSWORD, role=role)

        assert result.authenticated_as == Role.ADMIN
        assert decode_token(result.access_token)["role"] == "admin"

    @pytest.mark.asyncio
    async def test_role_not_held(self, db_session, auth):
        await create_user(db_session, "alice")
        with pytest.raises(RoleNotAssignedError):
            await auth.login("alice", TEST_PASSWORD, role="admin")

    @pytest.mark.asyncio
    async def test_unknown_role(self, db_session, auth):
        await create_user(db_session, "alice")
        with pytest.raises(RoleNotAssignedError):
            await auth.login("alice", TEST_PASSWORD, role="wizard")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username,password", [("alice", "Wrong1234"), ("nobody", TEST_PASSWORD)])
    async def test_bad_credentials(self, db_session, auth, username, password):
        await create_user(db_session, "alice")
        with pytest.raises(InvalidCredentialsError):
            await auth.login(username, password)


class TestRefresh:
    """Tests for refresh token rotation and logout."""

    @pytest.mark.asyncio
    async def test_fresh_token_is_kept(self, db_session, auth):
        await create_user(db_session, "root", is_superuser=True)
        login = await auth.login("root", TEST_PASSWORD, role="admin")

        refreshed = await auth.refresh(login.refresh_token)

        assert refreshed.refresh_token == login.refresh_token
        assert refreshed.authenticated_as == Role.ADMIN
        assert decode_token(refreshed.access_token)["role"] == "admin"

    @pytest.mark.asyncio
    async def test_near_expiry_token_is_rotated(self, db_session, auth):
        await create_user(db_session, "alice")
        login = await auth.login("alice", TEST_PASSWORD)
        tokens = RefreshTokenService(db_session)
        old = await tokens.validate_usable(login.refresh_token)
        old.expires_at = datetime.utcnow() + timedelta(hours=1)
        await db_session.flush()

        refreshed = await auth.refresh(login.refresh_token)

        assert refreshed.refresh_token != login.refresh_token
        with pytest.raises(InvalidRefreshTokenError):
            await tokens.validate_usable(login.refresh_token)
        await tokens.validate_usable(refreshed.refresh_token)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, db_session, auth):
        await create_user(db_session, "alice")
        login = await auth.login("alice", TEST_PASSWORD)
        old = await RefreshTokenService(db_session).validate_usable(login.refresh_token)
        old.expires_at = datetime.utcnow() - timedelta(seconds=1)
        await db_session.flush()

        with pytest.raises(InvalidRefreshTokenError):
            await auth.refresh(login.refresh_token)

    @pytest.mark.asyncio
    async def test_logout_revokes(self, db_session, auth):
        await create_user(db_session, "alice")
        login = await auth.login("alice", TEST_PASSWORD)

        await auth.logout(login.refresh_token)
        await auth.logout(login.refresh_token)

        with pytest.raises(InvalidRefreshTokenError):
            await auth.refresh(login.refresh_token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "unknown-token"])
    async def test_unknown_token(self, auth, token):
        with pytest.raises(InvalidRefreshTokenError):
            await auth.refresh(token)
