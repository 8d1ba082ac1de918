"""
Shared pytest configuration for fairway tests.

By default each test gets a fresh SQLite database (aiosqlite) in its own
temporary directory. Set TEST_DATABASE_URL to run the same tests against
PostgreSQL.

SAFETY: This module REFUSES to run against any database whose name does not
contain the substring "test". This prevents accidental drop of the
development or production database when environment variables are
misconfigured.
"""

import os

# Must be set before fairway.api.routes is imported (disables rate limiting)
os.environ.setdefault("ENV", "test")

import asyncio
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from fairway.database.db import Base
from fairway.database.models import User
from fairway.services import notification_service


def _resolve_test_database_url() -> Optional[str]:
    """Return TEST_DATABASE_URL after the safety check, or None for SQLite.

    Raises ``RuntimeError`` if the URL does not point to a database whose
    name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        return None

    # ── Safety gate: database name MUST contain "test" ──────────────────
    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Resolved URL: {url}\n\n"
            f"  Fix: set TEST_DATABASE_URL to a test database, e.g.:\n"
            f"    export TEST_DATABASE_URL=postgresql+asyncpg://.../{db_name}_test\n"
            f"  Or unset it to use a temporary SQLite database.\n"
            f"{'=' * 70}"
        )

    return url


# Validated at import time so pytest fails immediately with a clear message
TEST_DATABASE_URL = _resolve_test_database_url()


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine with a freshly created schema."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'fairway_test.db'}"

    # NullPool avoids connection reuse across event loops
    engine = create_async_engine(url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await asyncio.sleep(0.01)  # let pending connection closes finish
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def session_factory(test_engine):
    """Session maker bound to the test engine, for tests that need several
    independent sessions (one per concurrent caller)."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def _create_user(db_session, username: str, first_name: str = None, last_name: str = None) -> int:
    """Helper: create and commit a user profile, return its id."""
    user = User(
        username=username,
        email=f"{username}@example.com",
        first_name=first_name,
        last_name=last_name,
    )
    db_session.add(user)
    await db_session.commit()
    return user.id


@pytest_asyncio.fixture
async def users(db_session):
    """Create four test users."""
    return {
        "alice": await _create_user(db_session, "alice", "Alice", "Alpha"),
        "bob": await _create_user(db_session, "bob", "Bob", "Beta"),
        "carol": await _create_user(db_session, "carol", "Carol", "Gamma"),
        "dave": await _create_user(db_session, "dave"),
    }


@pytest.fixture
def sent_notifications(monkeypatch) -> List[Dict]:
    """Capture notification dispatches instead of calling the external service."""
    sent: List[Dict] = []

    async def fake_send_notification(user_id, type, title, message, data=None):
        sent.append(
            {"user_id": user_id, "type": type, "title": title, "message": message, "data": data}
        )
        return True

    monkeypatch.setattr(notification_service, "send_notification", fake_send_notification)
    return sent


@pytest.fixture
def failing_notifications(monkeypatch):
    """Make every notification dispatch fail."""

    async def fake_send_notification(user_id, type, title, message, data=None):
        raise notification_service.DependencyFailureError("notification service down")

    monkeypatch.setattr(notification_service, "send_notification", fake_send_notification)
