"""Service for admin broadcasts and per-session read tracking."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, case, exists, func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..errors import NotFoundError
from ..orm.base import as_utc, utcnow
from ..orm.broadcast import PRIORITY_RANK, AdminBroadcast, BroadcastPriority, BroadcastRead
from .access import require_admin
from .database import get_db_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BroadcastView:
    """A broadcast as shown to one session."""

    id: str
    title: str
    content: str
    priority: str
    expires_at: Optional[datetime]
    created_at: datetime
    is_read: bool


def _active_clause(now: datetime):
    return and_(
        AdminBroadcast.is_active == True,  # noqa: E712
        AdminBroadcast.is_deleted == False,  # noqa: E712
        or_(AdminBroadcast.expires_at.is_(None), AdminBroadcast.expires_at > now),
    )


def _read_by(session_id: str):
    return exists().where(
        BroadcastRead.broadcast_id == AdminBroadcast.id,
        BroadcastRead.session_id == session_id,
    )


_priority_rank = case(PRIORITY_RANK, value=AdminBroadcast.priority, else_=PRIORITY_RANK["NORMAL"])


class BroadcastService:
    """Service for broadcast banners and their read markers."""

    async def get_active(self, session_id: str, now: Optional[datetime] = None) -> List[BroadcastView]:
        """Active broadcasts for a session, highest priority then newest first."""
        now = as_utc(now)
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(AdminBroadcast, _read_by(session_id).label("is_read"))
                .where(_active_clause(now))
                .order_by(_priority_rank.desc(), AdminBroadcast.created_at.desc())
            )
            return [
                BroadcastView(
                    id=broadcast.id,
                    title=broadcast.title,
                    content=broadcast.content,
                    priority=broadcast.priority,
                    expires_at=broadcast.expires_at,
                    created_at=broadcast.created_at,
                    is_read=bool(is_read),
                )
                for broadcast, is_read in result.all()
            ]

    async def unread_count(self, session_id: str, now: Optional[datetime] = None) -> int:
        """Count active broadcasts this session has not marked as read."""
        now = as_utc(now)
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(func.count(AdminBroadcast.id)).where(
                    _active_clause(now),
                    ~_read_by(session_id),
                )
            )
            return result.scalar_one()

    async def mark_read(self, broadcast_id: str, session_id: str) -> None:
        """Record that a session has seen a broadcast. Repeat calls are no-ops."""
        stmt = (
            sqlite_insert(BroadcastRead)
            .values(broadcast_id=broadcast_id, session_id=session_id)
            .on_conflict_do_nothing(index_elements=["broadcast_id", "session_id"])
        )
        db = get_db_service()
        async with db.session() as session:
            await session.execute(stmt)

    async def create_broadcast(
        self,
        author_id: str,
        title: str,
        content: str,
        priority: BroadcastPriority = BroadcastPriority.NORMAL,
        expires_in_hours: Optional[float] = None,
    ) -> AdminBroadcast:
        """Publish a new broadcast.

        Raises:
            NotAuthorizedError: If the author is not an admin.
        """
        expires_at = utcnow() + timedelta(hours=expires_in_hours) if expires_in_hours else None
        db = get_db_service()
        async with db.session() as session:
            await require_admin(session, author_id)
            broadcast = AdminBroadcast(
                title=title,
                content=content,
                priority=BroadcastPriority(priority).value,
                is_active=True,
                expires_at=expires_at,
            )
            session.add(broadcast)
            await session.flush()

        logger.info("Broadcast %s created by %s (%s)", broadcast.id, author_id, broadcast.priority)
        return broadcast

    async def deactivate_broadcast(self, author_id: str, broadcast_id: str) -> None:
        """Hide a broadcast from every session.

        Raises:
            NotAuthorizedError: If the author is not an admin.
            NotFoundError: If the broadcast does not exist.
        """
        db = get_db_service()
        async with db.session() as session:
            await require_admin(session, author_id)
            broadcast = await session.get(AdminBroadcast, broadcast_id)
            if broadcast is None:
                raise NotFoundError(f"Broadcast {broadcast_id} not found")
            broadcast.is_active = False

        logger.info("Broadcast %s deactivated by %s", broadcast_id, author_id)
