"""
Trading Simulator - Notification Schemas
"""
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from app.db.models.user import Role


class NotificationCreate(BaseModel):
    subject: str = Field(..., max_length=255)
    body: str


class RoleNotificationCreate(NotificationCreate):
    role: Role


class NotificationResponse(BaseModel):
    id: int
    sender_user_id: int
    receiver_user_id: int
    subject: str
    body: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BroadcastResult(BaseModel):
    sent: int
