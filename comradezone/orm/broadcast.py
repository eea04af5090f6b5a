"""Admin broadcast and per-session read marker models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase, UTCDateTime, utcnow


class BroadcastPriority(str, Enum):
    """Banner priority, lowest first."""

    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


# Display rank used for ordering (higher shows first)
PRIORITY_RANK = {
    BroadcastPriority.LOW.value: 0,
    BroadcastPriority.NORMAL.value: 1,
    BroadcastPriority.HIGH.value: 2,
    BroadcastPriority.URGENT.value: 3,
}


class AdminBroadcast(SqlalchemyBase):
    """Admin-authored announcement shown to every session until dismissed or expired."""

    __tablename__ = "admin_broadcasts"
    __table_args__ = (
        Index("idx_admin_broadcasts_active", "is_active", "expires_at"),
        Index("idx_admin_broadcasts_created_at", "created_at"),
    )

    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BroadcastPriority.NORMAL.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AdminBroadcast(id={self.id}, priority={self.priority}, "
            f"is_active={self.is_active}, expires_at={self.expires_at})>"
        )


class BroadcastRead(SqlalchemyBase):
    """Marks a broadcast as seen by one anonymous session."""

    __tablename__ = "broadcast_reads"
    __table_args__ = (
        UniqueConstraint("broadcast_id", "session_id", name="uq_broadcast_reads_broadcast_session"),
        Index("idx_broadcast_reads_session_id", "session_id"),
    )

    broadcast_id: Mapped[str] = mapped_column(
        String, ForeignKey("admin_broadcasts.id", ondelete="CASCADE"), nullable=False
    )
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    read_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
