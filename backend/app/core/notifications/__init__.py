"""
Notifications Module
"""
from app.core.notifications.service import NotificationService

__all__ = ["NotificationService"]
