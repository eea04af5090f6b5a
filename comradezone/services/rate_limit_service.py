"""Service for throttling anonymous campus chat senders by IP."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import case, delete, literal, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..orm.base import as_utc
from ..orm.rate_limit import AnonymousChatLimit
from .database import get_db_service

logger = logging.getLogger(__name__)

ANONYMOUS_MESSAGE_LIMIT = 10
DEFAULT_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class LimitStatus:
    """Snapshot of one IP's standing against the limit."""

    used: int
    remaining: int
    limited: bool


class RateLimitService:
    """Rolling-window message limit for anonymous senders, keyed by client IP.

    A window restarts relative to each IP's own last reset, never at a fixed
    wall-clock boundary. Checking is separate from consuming: ``check`` may
    reset an expired window, ``record_message`` counts an accepted message.
    """

    def __init__(self, limit: int = ANONYMOUS_MESSAGE_LIMIT, window: timedelta = DEFAULT_WINDOW):
        self.limit = limit
        self.window = window

    def _status(self, used: int) -> LimitStatus:
        return LimitStatus(
            used=used,
            remaining=max(0, self.limit - used),
            limited=used >= self.limit,
        )

    async def check(self, ip_address: str, now: Optional[datetime] = None) -> LimitStatus:
        """Report usage for an IP, resetting its counter first if the window has elapsed."""
        now = as_utc(now)
        window_start = now - self.window
        db = get_db_service()

        async with db.session() as session:
            # Conditional reset is a single statement; a concurrent reset is a no-op
            reset = await session.execute(
                update(AnonymousChatLimit)
                .where(
                    AnonymousChatLimit.ip_address == ip_address,
                    AnonymousChatLimit.last_reset_at <= window_start,
                )
                .values(message_count=0, last_reset_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if reset.rowcount:
                logger.debug("Reset anonymous chat window for %s", ip_address)

            result = await session.execute(
                select(AnonymousChatLimit.message_count).where(
                    AnonymousChatLimit.ip_address == ip_address
                )
            )
            used = result.scalar_one_or_none() or 0

        return self._status(used)

    async def record_message(self, ip_address: str, now: Optional[datetime] = None) -> LimitStatus:
        """Count one accepted message for an IP.

        Runs as a single upsert so concurrent senders cannot lose increments.
        A missing record starts at 1; an expired window restarts at 1.
        """
        now = as_utc(now)
        window_start = now - self.window
        now_value = literal(now, AnonymousChatLimit.last_reset_at.type)
        expired = AnonymousChatLimit.last_reset_at <= window_start

        stmt = sqlite_insert(AnonymousChatLimit).values(
            ip_address=ip_address,
            message_count=1,
            last_reset_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AnonymousChatLimit.ip_address],
            set_={
                "message_count": case(
                    (expired, 1), else_=AnonymousChatLimit.message_count + 1
                ),
                "last_reset_at": case(
                    (expired, now_value), else_=AnonymousChatLimit.last_reset_at
                ),
                "updated_at": now_value,
            },
        )

        db = get_db_service()
        async with db.session() as session:
            await session.execute(stmt)
            result = await session.execute(
                select(AnonymousChatLimit.message_count).where(
                    AnonymousChatLimit.ip_address == ip_address
                )
            )
            used = result.scalar_one()

        return self._status(used)

    async def prune_stale(
        self, older_than: timedelta = timedelta(days=7), now: Optional[datetime] = None
    ) -> int:
        """Delete records whose window started before the cutoff.

        A pruned IP behaves exactly like a fresh one, so this never changes a
        limit decision as long as ``older_than`` is at least the window.
        """
        if older_than < self.window:
            raise ValueError("older_than must be at least the rate limit window")

        cutoff = as_utc(now) - older_than
        db = get_db_service()

        async with db.session() as session:
            result = await session.execute(
                delete(AnonymousChatLimit)
                .where(AnonymousChatLimit.last_reset_at < cutoff)
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount or 0

        logger.info("Pruned %d stale anonymous chat limit record(s)", removed)
        return removed
