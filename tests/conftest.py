"""Shared fixtures for database-backed tests."""

import asyncio

import pytest

from comradezone.services import database


@pytest.fixture
def run_db(tmp_path):
    """Run an async scenario against a fresh SQLite database.

    The whole scenario runs inside one event loop so the engine's pooled
    connections never cross loops.
    """

    def runner(scenario):
        async def wrapper():
            await database.init_db_service(tmp_path / "test.db")
            try:
                return await scenario()
            finally:
                await database.get_db_service().close()
                database.db_service = None

        return asyncio.run(wrapper())

    return runner


async def add_rows(*rows):
    """Persist ORM objects in one transaction and return them."""
    db = database.get_db_service()
    async with db.session() as session:
        session.add_all(rows)
    return rows


async def count_rows(model, *criteria) -> int:
    from sqlalchemy import func, select

    db = database.get_db_service()
    async with db.session() as session:
        result = await session.execute(select(func.count(model.id)).where(*criteria))
        return result.scalar_one()
