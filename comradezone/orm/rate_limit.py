"""AnonymousChatLimit model for per-IP anonymous message counters."""

from datetime import datetime

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase, UTCDateTime


class AnonymousChatLimit(SqlalchemyBase):
    """Rolling-window message counter for one anonymous client IP."""

    __tablename__ = "anonymous_chat_limits"
    __table_args__ = (Index("idx_anonymous_chat_limits_last_reset_at", "last_reset_at"),)

    ip_address: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reset_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AnonymousChatLimit(ip_address={self.ip_address}, "
            f"message_count={self.message_count}, last_reset_at={self.last_reset_at})>"
        )
