"""
Shared pytest configuration for backend tests.

Defaults to a SQLite file database (aiosqlite) so the suite runs without a
database server; point TEST_DATABASE_URL at a PostgreSQL test database to run
against the production engine.

SAFETY: This module REFUSES to run against any database whose name does not
contain the substring "test".
"""

import os
import tempfile

import pytest_asyncio
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if the resolved URL does not point to a database
    whose name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        path = os.path.join(tempfile.gettempdir(), "fightpicks_test.db")
        url = f"sqlite+aiosqlite:///{path}"

    # Database name is the last path segment
    db_name = url.rsplit("/", 1)[-1].split("?")[0]
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Fix: set TEST_DATABASE_URL to a test database, e.g.:\n"
            f"    export TEST_DATABASE_URL=postgresql+asyncpg://.../fightpicks_test\n"
            f"{'=' * 70}"
        )
    return url


TEST_DATABASE_URL = _resolve_test_database_url()

# Must be set before any fightpicks module builds the app engine or limiter
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

from fightpicks.database import db  # noqa: E402
from fightpicks.database.db import Base, configure_sqlite_engine  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with all tables."""
    # NullPool avoids reusing connections across event loops
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    configure_sqlite_engine(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Code that opens its own sessions through db.AsyncSessionLocal
    # must hit the test engine too
    test_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    original_async_session_local = db.AsyncSessionLocal
    db.AsyncSessionLocal = test_session_maker

    yield engine

    db.AsyncSessionLocal = original_async_session_local
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Session maker bound to the test engine, for tests that need several sessions."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(test_engine, session_factory):
    """
    Create a test database session with automatic cleanup.
    Tables are emptied before each test to ensure clean state.
    """
    async with test_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(delete(table))

    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()
