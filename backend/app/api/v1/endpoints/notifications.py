"""
Trading Simulator - Notification Endpoints

Users read their inbox; admins send.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from app.core.notifications import NotificationService
from app.dependencies import get_current_active_user, get_current_admin, get_notification_service
from app.db.models.user import User
from app.schemas.notification import (
    BroadcastResult,
    NotificationCreate,
    NotificationResponse,
    RoleNotificationCreate,
)

router = APIRouter()


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_active_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Caller's notifications, newest first."""
    return [
        NotificationResponse.model_validate(n)
        for n in await notifications.list_for_user(current_user.id)
    ]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    notification = await notifications.mark_as_read(notification_id, user_id=current_user.id)
    return NotificationResponse.model_validate(notification)


@router.post("/user/{user_id}", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def send_to_user(
    user_id: int,
    data: NotificationCreate,
    admin: User = Depends(get_current_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    notification = await notifications.send_to_user(admin.id, user_id, data.subject, data.body)
    return NotificationResponse.model_validate(notification)


@router.post("/role", response_model=BroadcastResult, status_code=status.HTTP_201_CREATED)
async def send_to_role(
    data: RoleNotificationCreate,
    admin: User = Depends(get_current_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    sent = await notifications.send_to_role(admin.id, data.role, data.subject, data.body)
    return BroadcastResult(sent=len(sent))


@router.post("/all", response_model=BroadcastResult, status_code=status.HTTP_201_CREATED)
async def send_to_all(
    data: NotificationCreate,
    admin: User = Depends(get_current_admin),
    notifications: NotificationService = Depends(get_notification_service),
):
    sent = await notifications.send_to_all(admin.id, data.subject, data.body)
    return BroadcastResult(sent=len(sent))
