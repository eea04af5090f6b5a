"""Service layer for business logic and database operations."""

from .banned_word_service import BannedWordEntry, BannedWordService
from .broadcast_service import BroadcastService, BroadcastView
from .database import DatabaseService, get_db_service, init_db_service
from .notification_service import FanoutResult, GuestContact, NotificationService
from .rate_limit_service import LimitStatus, RateLimitService

__all__ = [
    "BannedWordEntry",
    "BannedWordService",
    "BroadcastService",
    "BroadcastView",
    "DatabaseService",
    "FanoutResult",
    "GuestContact",
    "LimitStatus",
    "NotificationService",
    "RateLimitService",
    "get_db_service",
    "init_db_service",
]
