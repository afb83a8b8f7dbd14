"""Integration-test fixtures.

These tests drive the real app against PostgreSQL with migrations applied
(``alembic upgrade head``), so the row locks, compare-and-set updates and
``RETURNING`` claims run as they do in production. All of them share one
event loop so the module-level async engine pool stays valid for the whole
session. Without a reachable, migrated database the tests are skipped.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.au_common.database import engine
from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def database() -> None:
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT to_regclass('public.item_discussions')"))
            migrated = result.scalar() is not None
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"PostgreSQL not reachable: {exc}")
    if not migrated:
        pytest.skip("Database not migrated, run alembic upgrade head")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
