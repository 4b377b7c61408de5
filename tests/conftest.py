"""
Shared fixtures for WordWise backend integration tests.

Runs against a throwaway SQLite database (aiosqlite) by default; set
TEST_DATABASE_URL to point at a Postgres instance instead. Each test gets its
own session; tables are created before and dropped after every test.

The LLM client is never called for real: tests that need model output use
the ``fake_llm`` fixture, which overrides ``get_llm_service`` with a scripted
fake.
"""
from __future__ import annotations

import os
from typing import Any, AsyncGenerator, Dict, List, Optional, Union

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine point at the test DB.
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./.pytest_wordwise.db",
)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("OPENAI_API_KEY", "")

from app.database import Base, get_db, seed_default_templates  # noqa: E402
from app.main import app  # noqa: E402
from app.services.openai_client import LLMNotConfiguredError, get_llm_service  # noqa: E402


# ---------------------------------------------------------------------------
# Fake LLM
# ---------------------------------------------------------------------------

class FakeLLM:
    """
    Stand-in for OpenAIChatService.

    ``replies`` are returned in order; an exception instance in the queue is
    raised instead. Once the queue is empty ``default_reply`` is returned.
    Every call is recorded in ``calls``.
    """

    def __init__(self, replies: Optional[List[Union[str, Exception]]] = None, configured: bool = True):
        self.replies: List[Union[str, Exception]] = list(replies or [])
        self.default_reply = '{"title": "Generated title", "content": "Generated content"}'
        self.configured = configured
        self.calls: List[Dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def ensure_configured(self) -> None:
        if not self.configured:
            raise LLMNotConfiguredError()

    async def complete(self, system_prompt: str, user_prompt: str, **kwargs: Any) -> str:
        self.ensure_configured()
        self.calls.append({"system": system_prompt, "user": user_prompt, **kwargs})
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return self.default_reply

    async def check_health(self) -> bool:
        return self.configured


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session for each test. After the test, all tables are dropped
    so each test starts with a clean slate.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB dependency
    overridden to use the per-test session.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def fake_llm(client: AsyncClient) -> FakeLLM:
    """Scripted LLM wired into every AI route. Push replies onto ``fake_llm.replies``."""
    fake = FakeLLM()
    app.dependency_overrides[get_llm_service] = lambda: fake
    return fake


@pytest_asyncio.fixture
async def seeded_templates(db_session: AsyncSession) -> int:
    inserted = await seed_default_templates(db_session)
    await db_session.commit()
    return inserted


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

AUTH_HEADERS = {
    "X-User-Id": "test-user-1",
    "X-User-Email": "test1@example.com",
    "X-User-Name": "Test User 1",
}

AUTH_HEADERS_USER2 = {
    "X-User-Id": "test-user-2",
    "X-User-Email": "test2@example.com",
    "X-User-Name": "Test User 2",
}

LONG_TEXT = (
    "We spent a year building a tool for small teams. "
    "At first nobody used it and we almost gave up. "
    "Then we talked to our users and learned what they needed. "
    "The second version solved a real problem and growth followed. "
    "The lesson is simple: listen before you build."
)


async def create_document(
    client: AsyncClient,
    title: str = "My Document",
    content: str = LONG_TEXT,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    resp = await client.post(
        "/api/documents",
        json={"title": title, "content": content},
        headers=headers or AUTH_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["document"]


async def create_project(
    client: AsyncClient,
    title: str = "My Carousel",
    headers: Optional[Dict[str, str]] = None,
    **fields: Any,
) -> Dict[str, Any]:
    resp = await client.post(
        "/api/projects",
        json={"title": title, **fields},
        headers=headers or AUTH_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["project"]
