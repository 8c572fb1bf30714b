"""
Users Module
"""
from app.core.users.service import UserService

__all__ = ["UserService"]
