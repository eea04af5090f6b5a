"""Role checks shared by admin-only service operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotAuthorizedError
from ..orm.user import User, UserRole


async def require_admin(session: AsyncSession, user_id: str) -> None:
    """Raise NotAuthorizedError unless ``user_id`` is an existing admin."""
    result = await session.execute(
        select(User.role).where(User.id == user_id, User.is_deleted == False)  # noqa: E712
    )
    if result.scalar_one_or_none() != UserRole.ADMIN.value:
        raise NotAuthorizedError("Admin access required")
