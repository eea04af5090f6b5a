"""Marketplace models: listings and item requests."""

from enum import Enum
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import SqlalchemyBase


class ListingStatus(str, Enum):
    PENDING_COMMISSION = "PENDING_COMMISSION"
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    REJECTED = "REJECTED"


class RequestStatus(str, Enum):
    OPEN = "OPEN"
    FULFILLED = "FULFILLED"
    CLOSED = "CLOSED"


class Listing(SqlalchemyBase):
    """Item put up for sale by a registered seller."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("idx_listings_category_id", "category_id"),
        Index("idx_listings_seller_id", "seller_id"),
    )

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category_id: Mapped[str] = mapped_column(String, nullable=False)
    seller_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ListingStatus.PENDING_COMMISSION.value
    )


class ItemRequest(SqlalchemyBase):
    """A wanted item, posted by a registered user or by a guest with an email."""

    __tablename__ = "item_requests"
    __table_args__ = (Index("idx_item_requests_category_status", "category_id", "status"),)

    title: Mapped[str] = mapped_column(String, nullable=False)
    category_id: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RequestStatus.OPEN.value)

    # Exactly one of these is expected; rows with neither are ignored by fan-out
    requester_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    guest_email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    guest_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
