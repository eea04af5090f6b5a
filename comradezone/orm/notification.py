"""Notification model for in-app notifications."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase, UTCDateTime


class NotificationType(str, Enum):
    """Closed set of notification kinds."""

    MESSAGE = "MESSAGE"
    LISTING_APPROVED = "LISTING_APPROVED"
    LISTING_REJECTED = "LISTING_REJECTED"
    LISTING_SOLD = "LISTING_SOLD"
    SUGGESTION_MATCH = "SUGGESTION_MATCH"
    ESCROW_RELEASED = "ESCROW_RELEASED"
    ESCROW_REFUNDED = "ESCROW_REFUNDED"
    CONFESSION_PENDING = "CONFESSION_PENDING"
    CRUSH_PENDING = "CRUSH_PENDING"
    SPOTTED_PENDING = "SPOTTED_PENDING"


class Notification(SqlalchemyBase):
    """One notification for exactly one recipient."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_user_id_read_at", "user_id", "read_at"),
        Index("idx_notifications_created_at", "created_at"),
    )

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    href: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Notification(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, read={self.read_at is not None})>"
        )
