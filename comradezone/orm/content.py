"""Models for anonymously submitted content and chat messages."""

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase


class ReviewStatus(str, Enum):
    """Moderation state of a submission awaiting admin review."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Confession(SqlalchemyBase):
    """Anonymous confession, hidden until an admin approves it."""

    __tablename__ = "confessions"
    __table_args__ = (Index("idx_confessions_status", "status"),)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ReviewStatus.PENDING.value)


class CampusCrush(SqlalchemyBase):
    """Anonymous crush post."""

    __tablename__ = "campus_crushes"
    __table_args__ = (Index("idx_campus_crushes_status", "status"),)

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ReviewStatus.PENDING.value)


class Spotted(SqlalchemyBase):
    """Anonymous "spotted" post tied to a campus location."""

    __tablename__ = "spotted"
    __table_args__ = (Index("idx_spotted_status", "status"),)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ReviewStatus.PENDING.value)


class CampusChatMessage(SqlalchemyBase):
    """Campus-wide chat message from a registered user or an anonymous session."""

    __tablename__ = "campus_chat_messages"
    __table_args__ = (
        Index("idx_campus_chat_created_at", "created_at"),
        Index("idx_campus_chat_ip_address", "ip_address"),
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    ip_address: Mapped[str] = mapped_column(String, nullable=False)
    is_filtered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class GroupChatMessage(SqlalchemyBase):
    """Anonymous group chat message (selling is not allowed here)."""

    __tablename__ = "group_chat_messages"
    __table_args__ = (Index("idx_group_chat_created_at", "created_at"),)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    anonymous_id: Mapped[str] = mapped_column(String(16), nullable=False)


class BannedWord(SqlalchemyBase):
    """Admin-managed addition to the group chat selling filter."""

    __tablename__ = "banned_words"

    word: Mapped[str] = mapped_column(String, nullable=False, unique=True)
