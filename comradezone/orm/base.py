"""Base classes for ORM models."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> datetime:
    """Convert an aware datetime to UTC, defaulting to now.

    SQLite DATETIME columns keep only the wall-clock reading, so every value
    compared against stored timestamps must be in UTC first. Naive values
    are taken to already be UTC.
    """
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC and loaded back as aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class SqlalchemyBase(Base):
    """Base model with string UUID ids, automatic timestamps and soft deletes."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    # Python-side default keeps sub-second ordering; SQLite's CURRENT_TIMESTAMP has 1s resolution
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, server_default=text("FALSE"), default=False)
