"""
Trading Simulator - Notification Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey

from app.db.database import Base


class Notification(Base):
    """In-app message from one user to another."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    sender_user_id = Column(Integer, nullable=False)
    receiver_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Notification {self.id} to={self.receiver_user_id} read={self.is_read}>"
