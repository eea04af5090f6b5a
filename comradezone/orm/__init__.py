"""ORM models for database persistence."""

from .base import Base, SqlalchemyBase, UTCDateTime
from .broadcast import AdminBroadcast, BroadcastPriority, BroadcastRead
from .content import (
    BannedWord,
    CampusChatMessage,
    CampusCrush,
    Confession,
    GroupChatMessage,
    ReviewStatus,
    Spotted,
)
from .marketplace import ItemRequest, Listing, ListingStatus, RequestStatus
from .notification import Notification, NotificationType
from .rate_limit import AnonymousChatLimit
from .user import User, UserRole

__all__ = [
    "Base",
    "SqlalchemyBase",
    "UTCDateTime",
    "AdminBroadcast",
    "AnonymousChatLimit",
    "BannedWord",
    "BroadcastPriority",
    "BroadcastRead",
    "CampusChatMessage",
    "CampusCrush",
    "Confession",
    "GroupChatMessage",
    "ItemRequest",
    "Listing",
    "ListingStatus",
    "Notification",
    "NotificationType",
    "RequestStatus",
    "ReviewStatus",
    "Spotted",
    "User",
    "UserRole",
]
