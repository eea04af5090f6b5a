"""Submission handlers: validate, moderate, persist and fan out.

Every public handler returns an ``ActionResult`` and never raises; policy,
rate-limit and validation rejections carry their own message, persistence
failures collapse to one generic message per handler.
"""

import logging
import zlib
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .errors import AlreadyExistsError, NotAuthorizedError, NotFoundError
from .moderation import (
    Severity,
    classify,
    filter_content,
    find_banned_words,
)
from .orm import (
    CampusChatMessage,
    CampusCrush,
    Confession,
    GroupChatMessage,
    Listing,
    ReviewStatus,
    Spotted,
)
from .services import (
    BannedWordService,
    BroadcastService,
    NotificationService,
    RateLimitService,
    get_db_service,
)

logger = logging.getLogger(__name__)

POLICY_REJECTION = "Your message contains inappropriate content and was not sent."
SUBMISSION_POLICY_REJECTION = "Your post contains inappropriate content and cannot be submitted."
DAILY_LIMIT_REACHED = "Daily message limit reached. Create an account to chat unlimited!"


@dataclass
class ActionResult:
    """Structured outcome handed back to the request layer."""

    success: bool
    error: Optional[str] = None
    data: Any = None
    messages_remaining: Optional[int] = None

    @classmethod
    def ok(cls, data: Any = None, messages_remaining: Optional[int] = None) -> "ActionResult":
        return cls(success=True, data=data, messages_remaining=messages_remaining)

    @classmethod
    def fail(cls, error: str, messages_remaining: Optional[int] = None) -> "ActionResult":
        return cls(success=False, error=error, messages_remaining=messages_remaining)


def client_ip_from_headers(headers: Mapping[str, str]) -> str:
    """Resolve the client IP from proxy headers.

    Uses the first ``x-forwarded-for`` hop, then ``x-real-ip``, else "unknown".
    """
    normalized = {k.lower(): v for k, v in headers.items()}
    forwarded_for = normalized.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = normalized.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"


def anonymous_id_for(session_id: str) -> str:
    """Stable public pseudonym for an anonymous session, e.g. ``Anon#0423``."""
    return f"Anon#{zlib.crc32(session_id.encode('utf-8')) % 10000:04d}"


class ActionHandlers:
    """Entry points used by the request layer for user submissions."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.rate_limit_service = RateLimitService(
            limit=config.rate_limit.anonymous_message_limit,
            window=timedelta(hours=config.rate_limit.window_hours),
        )
        self.notification_service = NotificationService()
        self.broadcast_service = BroadcastService()
        self.banned_word_service = BannedWordService()

    async def send_chat_message(
        self,
        content: str,
        session_id: str,
        client_ip: str,
        user_id: Optional[str] = None,
    ) -> ActionResult:
        """Post to the campus chat.

        Anonymous senders (no ``user_id``) are throttled per IP; the counter
        only moves after the message has been stored.
        """
        if not content or not content.strip():
            return ActionResult.fail("Message cannot be empty")

        max_length = self.config.moderation.max_chat_length
        if len(content) > max_length:
            return ActionResult.fail(f"Message too long (max {max_length} characters)")

        try:
            if not user_id:
                status = await self.rate_limit_service.check(client_ip)
                if status.limited:
                    logger.info("Anonymous chat limit reached for %s", client_ip)
                    return ActionResult.fail(DAILY_LIMIT_REACHED, messages_remaining=0)

            if classify(content) is Severity.BLOCKED:
                logger.info("Blocked abusive chat message from session %s", session_id)
                return ActionResult.fail(POLICY_REJECTION)

            filtered = filter_content(content)
            db = get_db_service()
            async with db.session() as session:
                message = CampusChatMessage(
                    content=filtered,
                    session_id=session_id,
                    user_id=user_id,
                    ip_address=client_ip,
                    is_filtered=filtered != content,
                )
                session.add(message)
                await session.flush()

            remaining = None
            if not user_id:
                status = await self.rate_limit_service.record_message(client_ip)
                remaining = status.remaining

            return ActionResult.ok(data=message, messages_remaining=remaining)

        except SQLAlchemyError as e:
            logger.error("Error sending chat message: %s", e, exc_info=True)
            return ActionResult.fail("Failed to send message")

    async def mark_broadcast_read(self, broadcast_id: str, session_id: str) -> ActionResult:
        """Dismiss a broadcast banner for an anonymous session."""
        try:
            await self.broadcast_service.mark_read(broadcast_id, session_id)
            return ActionResult.ok()
        except SQLAlchemyError as e:
            logger.error("Error marking broadcast read: %s", e, exc_info=True)
            return ActionResult.fail("Failed to mark broadcast as read")

    async def unread_broadcast_count(self, session_id: str) -> int:
        """Badge count for the banner; 0 when the lookup fails."""
        try:
            return await self.broadcast_service.unread_count(session_id)
        except SQLAlchemyError as e:
            logger.warning("Could not count unread broadcasts: %s", e)
            return 0

    async def send_group_message(
        self,
        content: str,
        session_id: str,
        author_name: Optional[str] = None,
    ) -> ActionResult:
        """Post to the anonymous group chat, where selling language is refused."""
        if not content or not content.strip():
            return ActionResult.fail("Message content is required")

        try:
            banned_words = await self.banned_word_service.active_words()
            found = find_banned_words(content, banned_words)
            if found:
                return ActionResult.fail(
                    f"Message contains prohibited words: {', '.join(found)}. "
                    "Selling is not allowed in group chat."
                )

            db = get_db_service()
            async with db.session() as session:
                message = GroupChatMessage(
                    content=content.strip(),
                    author_name=(author_name or "").strip() or None,
                    session_id=session_id,
                    anonymous_id=anonymous_id_for(session_id),
                )
                session.add(message)
                await session.flush()

            return ActionResult.ok(data={"id": message.id, "anonymous_id": message.anonymous_id})

        except SQLAlchemyError as e:
            logger.error("Failed to send group message: %s", e, exc_info=True)
            return ActionResult.fail("Failed to send message")

    async def list_banned_words(self) -> ActionResult:
        try:
            words = await self.banned_word_service.list_words()
            return ActionResult.ok(data={"words": words})
        except SQLAlchemyError as e:
            logger.error("Failed to get banned words: %s", e, exc_info=True)
            return ActionResult.fail("Failed to get banned words")

    async def add_banned_word(self, admin_id: str, word: str) -> ActionResult:
        """Add a word to the group chat filter (admins only)."""
        try:
            banned_word = await self.banned_word_service.add_word(admin_id, word)
            return ActionResult.ok(data={"id": banned_word.id})
        except NotAuthorizedError:
            return ActionResult.fail("Admin access required")
        except ValueError:
            return ActionResult.fail("Word is required")
        except AlreadyExistsError:
            return ActionResult.fail("Word is already banned")
        except SQLAlchemyError as e:
            logger.error("Failed to add banned word: %s", e, exc_info=True)
            return ActionResult.fail("Failed to add banned word")

    async def remove_banned_word(self, admin_id: str, word_id: str) -> ActionResult:
        """Remove an admin-added word from the group chat filter (admins only)."""
        try:
            await self.banned_word_service.remove_word(admin_id, word_id)
            return ActionResult.ok()
        except NotAuthorizedError:
            return ActionResult.fail("Admin access required")
        except NotFoundError:
            return ActionResult.fail("Banned word not found")
        except SQLAlchemyError as e:
            logger.error("Failed to remove banned word: %s", e, exc_info=True)
            return ActionResult.fail("Failed to remove banned word")

    async def submit_confession(self, content: str) -> ActionResult:
        """Queue a confession for admin review and notify admins."""
        limits = self.config.moderation
        if not content or len(content.strip()) < limits.min_confession_length:
            return ActionResult.fail(
                f"Confession must be at least {limits.min_confession_length} characters"
            )
        if len(content) > limits.max_confession_length:
            return ActionResult.fail(
                f"Confession must be less than {limits.max_confession_length} characters"
            )
        if classify(content) is Severity.BLOCKED:
            return ActionResult.fail(SUBMISSION_POLICY_REJECTION)

        try:
            db = get_db_service()
            async with db.session() as session:
                confession = Confession(content=content.strip(), status=ReviewStatus.PENDING.value)
                session.add(confession)
                await session.flush()

            await self.notification_service.notify_admins_of_pending_confession()
            return ActionResult.ok(data={"id": confession.id})

        except SQLAlchemyError as e:
            logger.error("Failed to submit confession: %s", e, exc_info=True)
            return ActionResult.fail("Failed to submit confession")

    async def submit_crush(
        self, title: str, description: str, location: Optional[str] = None
    ) -> ActionResult:
        """Queue a campus crush for admin review and notify admins."""
        limits = self.config.moderation
        if not title or len(title) < limits.min_crush_title_length:
            return ActionResult.fail(
                f"Title must be at least {limits.min_crush_title_length} characters"
            )
        if not description or len(description) < limits.min_crush_description_length:
            return ActionResult.fail(
                f"Description must be at least {limits.min_crush_description_length} characters"
            )
        if classify(f"{title}\n{description}") is Severity.BLOCKED:
            return ActionResult.fail(SUBMISSION_POLICY_REJECTION)

        try:
            db = get_db_service()
            async with db.session() as session:
                crush = CampusCrush(
                    title=title,
                    description=description,
                    location=location or None,
                    status=ReviewStatus.PENDING.value,
                )
                session.add(crush)
                await session.flush()

            await self.notification_service.notify_admins_of_pending_crush()
            return ActionResult.ok(data={"id": crush.id})

        except SQLAlchemyError as e:
            logger.error("Failed to submit crush: %s", e, exc_info=True)
            return ActionResult.fail("Failed to submit crush")

    async def submit_spotted(self, content: str, location: str) -> ActionResult:
        """Queue a spotted post for admin review and notify admins."""
        if not content or not content.strip():
            return ActionResult.fail("Spotted content is required")
        if not location or not location.strip():
            return ActionResult.fail("Location is required")
        if classify(content) is Severity.BLOCKED:
            return ActionResult.fail(SUBMISSION_POLICY_REJECTION)

        try:
            db = get_db_service()
            async with db.session() as session:
                spotted = Spotted(
                    content=content.strip(),
                    location=location.strip(),
                    status=ReviewStatus.PENDING.value,
                )
                session.add(spotted)
                await session.flush()

            await self.notification_service.notify_admins_of_pending_spotted()
            return ActionResult.ok(data={"id": spotted.id})

        except SQLAlchemyError as e:
            logger.error("Failed to submit spotted: %s", e, exc_info=True)
            return ActionResult.fail("Failed to submit spotted")

    async def create_listing(
        self,
        seller_id: str,
        title: str,
        category_id: str,
        price: float,
        description: str = "",
    ) -> ActionResult:
        """Create a listing and tell open requests in its category.

        ``data["guest_contacts"]`` is for the email collaborator; nothing is
        emailed from here.
        """
        if not title or not title.strip():
            return ActionResult.fail("Title is required")
        if not category_id:
            return ActionResult.fail("Invalid category")
        if price is None or price < 0:
            return ActionResult.fail("Price cannot be negative")

        try:
            db = get_db_service()
            async with db.session() as session:
                listing = Listing(
                    title=title.strip(),
                    description=description or "",
                    price=price,
                    category_id=category_id,
                    seller_id=seller_id,
                )
                session.add(listing)
                await session.flush()

            fanout = await self.notification_service.notify_matching_requests(
                listing.id, listing.title, category_id
            )
            return ActionResult.ok(
                data={
                    "id": listing.id,
                    "notified_users": fanout.notified_users,
                    "guest_contacts": fanout.guest_contacts,
                }
            )

        except SQLAlchemyError as e:
            logger.error("Failed to create listing: %s", e, exc_info=True)
            return ActionResult.fail("Failed to create listing")
