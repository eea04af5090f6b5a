"""User model for registered accounts."""

from enum import Enum
from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase


class UserRole(str, Enum):
    """Account roles."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(SqlalchemyBase):
    """Registered account. Credentials live with the external auth provider."""

    __tablename__ = "users"
    __table_args__ = (Index("idx_users_role", "role"),)

    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER.value)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
