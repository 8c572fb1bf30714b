"""
Integration Tests - Users and Wallets
"""
from decimal import Decimal
import pytest

from app.core.security import verify_password
from app.core.users import UserService
from app.core.wallet import WalletService
from app.utils.exceptions import (
    EmailAlreadyExistsError,
    InvalidOrderError,
    UserAlreadyExistsError,
    UserNotFoundError,
    WalletNotFoundError,
)
from tests.factories import TEST_PASSWORD, create_user

pytestmark = pytest.mark.integration


class TestUserService:
    """Tests for user management."""

    @pytest.mark.asyncio
    async def test_create_user_with_wallet(self, db_session):
        users = UserService(db_session)

        user = await users.create_user("carol", TEST_PASSWORD, email=" Carol@Example.com ")

        assert user.email == "carol@example.com"
        assert user.is_superuser is False
        assert await WalletService(db_session).get_balance(user.id) == Decimal("5000.00")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session):
        users = UserService(db_session)
        await users.create_user("carol", TEST_PASSWORD, email="carol@example.com")

        with pytest.raises(EmailAlreadyExistsError):
            await users.create_user("caroline", TEST_PASSWORD, email="CAROL@example.com")

    @pytest.mark.asyncio
    async def test_update_user(self, db_session):
        users = UserService(db_session)
        user = await create_user(db_session, "alice")

        updated = await users.update_user(user.id, username="alicia", password="NewPass456")

        assert updated.username == "alicia"
        assert verify_password("NewPass456", updated.hashed_password)

    @pytest.mark.asyncio
    async def test_update_to_taken_username(self, db_session):
        users = UserService(db_session)
        await create_user(db_session, "alice")
        bob = await create_user(db_session, "bob")

        with pytest.raises(UserAlreadyExistsError):
            await users.update_user(bob.id, username="alice")

    @pytest.mark.asyncio
    async def test_list_find_and_delete(self, db_session):
        users = UserService(db_session)
        alice = await create_user(db_session, "alice")
        await create_user(db_session, "bob")

        assert [u.username for u in await users.list_users()] == ["alice", "bob"]
        assert (await users.find_by_username("bob")).username == "bob"

        await users.delete_user(alice.id)
        with pytest.raises(UserNotFoundError):
            await users.delete_user(alice.id)
        with pytest.raises(UserNotFoundError):
            await users.find_by_username("nobody")


class TestWalletService:
    """Tests for manual wallet adjustments."""

    @pytest.mark.asyncio
    async def test_add_cash(self, db_session):
        user = await create_user(db_session, "alice")
        wallets = WalletService(db_session)

        await wallets.add_cash(user.id, Decimal("100.005"))

        assert await wallets.get_balance(user.id) == Decimal("5100.01")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    async def test_add_cash_must_be_positive(self, db_session, amount):
        user = await create_user(db_session, "alice")
        with pytest.raises(InvalidOrderError):
            await WalletService(db_session).add_cash(user.id, amount)

    @pytest.mark.asyncio
    async def test_set_balance(self, db_session):
        user = await create_user(db_session, "alice")
        wallets = WalletService(db_session)

        await wallets.set_balance(user.id, Decimal("42.50"))
        assert await wallets.get_balance(user.id) == Decimal("42.50")

        with pytest.raises(InvalidOrderError):
            await wallets.set_balance(user.id, Decimal("-1"))

    @pytest.mark.asyncio
    async def test_missing_wallet(self, db_session):
        user = await create_user(db_session, "ghost", cash=None)
        with pytest.raises(WalletNotFoundError):
            await WalletService(db_session).get_balance(user.id)
