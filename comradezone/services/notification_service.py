"""Service for creating and reading in-app notifications."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import func, select, update

from ..orm.base import utcnow
from ..orm.marketplace import ItemRequest, RequestStatus
from ..orm.notification import Notification, NotificationType
from ..orm.user import User, UserRole
from .database import get_db_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuestContact:
    """A guest requester to be told about a matching listing out of band (email)."""

    email: str
    name: Optional[str]
    listing_title: str
    listing_id: str


@dataclass
class FanoutResult:
    """Outcome of matching a new listing against open item requests.

    Registered requesters get in-app notifications; guests are only returned
    for a separate delivery channel. A request lands in at most one list.
    """

    registered: List[Notification] = field(default_factory=list)
    guest_contacts: List[GuestContact] = field(default_factory=list)

    @property
    def notified_users(self) -> int:
        return len(self.registered)


class NotificationService:
    """Service for fan-out and recipient-side notification operations."""

    async def create_notification(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        body: Optional[str] = None,
        href: Optional[str] = None,
    ) -> Notification:
        """Create a single notification for one user."""
        db = get_db_service()
        async with db.session() as session:
            notification = Notification(
                user_id=user_id,
                type=NotificationType(notification_type).value,
                title=title,
                body=body or None,
                href=href or None,
            )
            session.add(notification)
            await session.flush()
            return notification

    async def notify_admins(
        self,
        notification_type: NotificationType,
        title: str,
        body: Optional[str] = None,
        href: Optional[str] = None,
    ) -> int:
        """Send the same notification to every admin.

        Returns:
            Number of admins notified; 0 (and no rows) when there are none.
        """
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(User.id).where(
                    User.role == UserRole.ADMIN.value,
                    User.is_deleted == False,  # noqa: E712
                )
            )
            admin_ids = result.scalars().all()

            if not admin_ids:
                logger.info("No admins to notify for %s", NotificationType(notification_type).value)
                return 0

            session.add_all(
                Notification(
                    user_id=admin_id,
                    type=NotificationType(notification_type).value,
                    title=title,
                    body=body or None,
                    href=href or None,
                )
                for admin_id in admin_ids
            )

        logger.info("Notified %d admin(s): %s", len(admin_ids), title)
        return len(admin_ids)

    async def notify_admins_of_pending_confession(self) -> int:
        return await self.notify_admins(
            NotificationType.CONFESSION_PENDING,
            "New confession submitted for review",
            "A new confession has been submitted and is awaiting your approval.",
            "/admin/confessions",
        )

    async def notify_admins_of_pending_crush(self) -> int:
        return await self.notify_admins(
            NotificationType.CRUSH_PENDING,
            "New crush submitted for review",
            "A new campus crush has been submitted and is awaiting your approval.",
            "/admin/crushes",
        )

    async def notify_admins_of_pending_spotted(self) -> int:
        return await self.notify_admins(
            NotificationType.SPOTTED_PENDING,
            "New spotted submitted for review",
            "A new spotted post has been submitted and is awaiting your approval.",
            "/admin/spotted",
        )

    async def notify_matching_requests(
        self, listing_id: str, listing_title: str, category_id: str
    ) -> FanoutResult:
        """Tell everyone with an open request in the listing's category.

        In-app rows are written together after all requests are enumerated.
        Guest-only requests are returned, not emailed from here.
        """
        fanout = FanoutResult()
        db = get_db_service()

        async with db.session() as session:
            result = await session.execute(
                select(ItemRequest).where(
                    ItemRequest.category_id == category_id,
                    ItemRequest.status == RequestStatus.OPEN.value,
                    ItemRequest.is_deleted == False,  # noqa: E712
                )
            )

            for request in result.scalars().all():
                if request.requester_id:
                    fanout.registered.append(
                        Notification(
                            user_id=request.requester_id,
                            type=NotificationType.SUGGESTION_MATCH.value,
                            title="New listing matches your suggestion!",
                            body=f'A new listing matches your suggestion: "{listing_title}"',
                            href=f"/listings/{listing_id}",
                        )
                    )
                elif request.guest_email:
                    fanout.guest_contacts.append(
                        GuestContact(
                            email=request.guest_email,
                            name=request.guest_name,
                            listing_title=listing_title,
                            listing_id=listing_id,
                        )
                    )
                else:
                    logger.debug("Item request %s has no contact, skipping", request.id)

            if fanout.registered:
                session.add_all(fanout.registered)

        logger.info(
            "Listing %s matched %d registered and %d guest request(s)",
            listing_id,
            fanout.notified_users,
            len(fanout.guest_contacts),
        )
        return fanout

    async def list_for_user(
        self, user_id: str, limit: int = 50, unread_only: bool = False
    ) -> List[Notification]:
        """Get a user's notifications, newest first."""
        db = get_db_service()
        async with db.session() as session:
            query = select(Notification).where(
                Notification.user_id == user_id,
                Notification.is_deleted == False,  # noqa: E712
            )
            if unread_only:
                query = query.where(Notification.read_at.is_(None))
            result = await session.execute(
                query.order_by(Notification.created_at.desc()).limit(limit)
            )
            return list(result.scalars().all())

    async def unread_count(self, user_id: str) -> int:
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.read_at.is_(None),
                    Notification.is_deleted == False,  # noqa: E712
                )
            )
            return result.scalar_one()

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        """Mark one of the user's own notifications as read.

        Returns:
            False if the notification does not exist or belongs to someone else.
        """
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(Notification).where(
                    Notification.id == notification_id,
                    Notification.user_id == user_id,
                )
            )
            notification = result.scalar_one_or_none()
            if notification is None:
                return False
            if notification.read_at is None:
                notification.read_at = utcnow()
            return True

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user as read. Returns rows updated."""
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read_at.is_(None))
                .values(read_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0
