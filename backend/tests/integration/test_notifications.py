"""
Integration Tests - Notifications
"""
import pytest
import pytest_asyncio

from app.core.notifications import NotificationService
from app.db.models.user import Role
from app.utils.exceptions import (
    EmptyNotificationError,
    NotificationNotFoundError,
    UserNotFoundError,
)
from tests.factories import create_user

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def people(db_session):
    admin = await create_user(db_session, "root", is_superuser=True)
    alice = await create_user(db_session, "alice")
    bob = await create_user(db_session, "bob")
    return admin, alice, bob


@pytest.fixture
def notifications(db_session):
    return NotificationService(db_session)


class TestSend:
    """Tests for sending notifications."""

    @pytest.mark.asyncio
    async def test_send_to_user(self, notifications, people):
        admin, alice, _ = people

        sent = await notifications.send_to_user(admin.id, alice.id, " Hello ", "Welcome aboard")

        assert sent.receiver_user_id == alice.id
        assert sent.sender_user_id == admin.id
        assert sent.subject == "Hello"
        assert sent.is_read is False

    @pytest.mark.asyncio
    async def test_send_to_missing_user(self, notifications, people):
        admin, _, _ = people
        with pytest.raises(UserNotFoundError):
            await notifications.send_to_user(admin.id, 999, "Hello", "Anyone?")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("subject,body", [("", "body"), ("subject", "   "), (None, "body")])
    async def test_blank_fields_rejected(self, notifications, people, subject, body):
        admin, alice, _ = people
        with pytest.raises(EmptyNotificationError):
            await notifications.send_to_user(admin.id, alice.id, subject, body)

    @pytest.mark.asyncio
    async def test_send_to_roles(self, notifications, people):
        admin, alice, bob = people

        to_admins = await notifications.send_to_role(admin.id, Role.ADMIN, "Ops", "Maintenance tonight")
        to_users = await notifications.send_to_role(admin.id, Role.USER, "News", "New symbols")

        assert [n.receiver_user_id for n in to_admins] == [admin.id]
        assert [n.receiver_user_id for n in to_users] == [admin.id, alice.id, bob.id]

    @pytest.mark.asyncio
    async def test_send_to_all(self, notifications, people):
        admin, _, _ = people
        sent = await notifications.send_to_all(admin.id, "Hi", "Everyone")
        assert len(sent) == 3


class TestInbox:
    """Tests for listing and acknowledging notifications."""

    @pytest.mark.asyncio
    async def test_list_newest_first(self, notifications, people):
        admin, alice, bob = people
        first = await notifications.send_to_user(admin.id, alice.id, "First", "1")
        second = await notifications.send_to_user(admin.id, alice.id, "Second", "2")
        await notifications.send_to_user(admin.id, bob.id, "Other", "3")

        inbox = await notifications.list_for_user(alice.id)

        assert [n.id for n in inbox] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_mark_as_read(self, notifications, people):
        admin, alice, _ = people
        sent = await notifications.send_to_user(admin.id, alice.id, "Hello", "Read me")

        read = await notifications.mark_as_read(sent.id, user_id=alice.id)

        assert read.is_read is True

    @pytest.mark.asyncio
    async def test_cannot_mark_someone_elses(self, notifications, people):
        admin, alice, bob = people
        sent = await notifications.send_to_user(admin.id, alice.id, "Hello", "Private")

        with pytest.raises(NotificationNotFoundError):
            await notifications.mark_as_read(sent.id, user_id=bob.id)

    @pytest.mark.asyncio
    async def test_mark_missing(self, notifications, people):
        with pytest.raises(NotificationNotFoundError):
            await notifications.mark_as_read(12345)
