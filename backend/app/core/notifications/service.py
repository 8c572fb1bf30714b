"""
Notification Service

In-app messages. Admins can message one user, every holder of a role,
or everyone; each recipient gets their own row.
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.notification import Notification
from app.db.models.user import Role
from app.db.repositories.user import UserRepository
from app.utils.exceptions import (
    EmptyNotificationError,
    NotificationNotFoundError,
    UserNotFoundError,
)


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise EmptyNotificationError(field)
    return value.strip()


class NotificationService:
    """Send, list and acknowledge notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def _deliver(
        self, sender_id: int, receiver_ids: List[int], subject: str, body: str
    ) -> List[Notification]:
        subject = _require_text("subject", subject)
        body = _require_text("body", body)

        notifications = [
            Notification(
                sender_user_id=sender_id,
                receiver_user_id=receiver_id,
                subject=subject,
                body=body,
            )
            for receiver_id in receiver_ids
        ]
        self.db.add_all(notifications)
        await self.db.flush()
        return notifications

    async def send_to_user(
        self, sender_id: int, receiver_id: int, subject: str, body: str
    ) -> Notification:
        if not await self.users.exists(receiver_id):
            raise UserNotFoundError(receiver_id)
        [notification] = await self._deliver(sender_id, [receiver_id], subject, body)
        logger.info(f"Notification {notification.id} sent from {sender_id} to {receiver_id}")
        return notification

    async def send_to_role(
        self, sender_id: int, role: Role, subject: str, body: str
    ) -> List[Notification]:
        """Every user holding the role. All users hold USER."""
        receiver_ids = await self.users.get_ids(superusers_only=(Role(role) == Role.ADMIN))
        sent = await self._deliver(sender_id, receiver_ids, subject, body)
        logger.info(f"Sent {len(sent)} notifications to role {Role(role).value}")
        return sent

    async def send_to_all(self, sender_id: int, subject: str, body: str) -> List[Notification]:
        receiver_ids = await self.users.get_ids()
        sent = await self._deliver(sender_id, receiver_ids, subject, body)
        logger.info(f"Broadcast {len(sent)} notifications")
        return sent

    async def list_for_user(self, user_id: int) -> List[Notification]:
        """Newest first."""
        result = await self.db.execute(
            select(Notification)
            .where(Notification.receiver_user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def mark_as_read(self, notification_id: int, user_id: Optional[int] = None) -> Notification:
        """Raises NotificationNotFoundError if missing or addressed to someone else."""
        notification = await self.db.get(Notification, notification_id)
        if notification is None or (user_id is not None and notification.receiver_user_id != user_id):
            raise NotificationNotFoundError(notification_id)
        notification.is_read = True
        await self.db.flush()
        return notification
