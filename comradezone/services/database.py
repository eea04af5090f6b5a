"""Database connection and session management."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..orm.base import Base

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseService:
    """Owns the async engine and hands out transactional sessions."""

    def __init__(self, database_path: str | Path):
        self.database_path = Path(database_path).expanduser()
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

        db_url = f"sqlite+aiosqlite:///{self.database_path}"
        self.engine: AsyncEngine = create_async_engine(
            db_url,
            echo=False,
            pool_pre_ping=True,
        )
        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)

        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def initialize(self):
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("Schema ready at %s", self.database_path)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope: commit on success, roll back and re-raise on error."""
        async with self.async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self):
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()


# Global database service instance
db_service: DatabaseService | None = None


def get_db_service() -> DatabaseService:
    """Get the global database service instance."""
    if db_service is None:
        raise RuntimeError("Database service not initialized")
    return db_service


async def init_db_service(database_path: str | Path) -> DatabaseService:
    """Create the global database service and its schema."""
    global db_service
    db_service = DatabaseService(database_path)
    await db_service.initialize()
    return db_service
