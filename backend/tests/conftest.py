"""Shared fixtures: in-memory database, ASGI test client and seed helpers."""

from __future__ import annotations

import itertools
import os
import tempfile
from collections.abc import AsyncIterator

# Must be set before app.config is imported anywhere.
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="newsroom-uploads-"))
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.core.accounting import apply_reading_time  # noqa: E402
from app.core.security import hash_password, issue_token  # noqa: E402
from app.database.connection import get_db  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.article import Article  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.models.category import Category  # noqa: E402
from app.models.user import User  # noqa: E402

PASSWORD = "secret123"


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest_asyncio.fixture
async def api_app(session_factory):
    """The FastAPI app with ``get_db`` bound to the test database."""

    async def _get_db():
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = _get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(api_app) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def make_user(session_factory):
    """Create a user with the given role; returns ``(user, auth_headers)``."""
    counter = itertools.count(1)

    async def _make(role: str = "visitor", username: str | None = None):
        n = next(counter)
        async with session_factory() as db_session:
            user = User(
                username=username or f"{role}{n}",
                email=f"{username or role}{n}@example.com",
                password_hash=hash_password(PASSWORD),
                role=role,
            )
            db_session.add(user)
            await db_session.flush()
            token = await issue_token(db_session, user)
            await db_session.commit()
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest_asyncio.fixture
async def make_category(session_factory):
    async def _make(name: str = "Politics", slug: str = "politics") -> Category:
        async with session_factory() as db_session:
            category = Category(name=name, slug=slug)
            db_session.add(category)
            await db_session.commit()
        return category

    return _make


@pytest_asyncio.fixture
async def make_article(session_factory):
    """Insert an article directly, bypassing the API."""
    counter = itertools.count(1)

    async def _make(
        title: str | None = None,
        content: str = "breaking news body",
        author: User | None = None,
        category: Category | None = None,
        **fields,
    ) -> Article:
        n = next(counter)
        data = {
            "title": title or f"Article {n}",
            "slug": fields.pop("slug", f"article-{n}"),
            "content": content,
            **fields,
        }
        apply_reading_time(data)
        async with session_factory() as db_session:
            article = Article(
                author_id=author.id if author else None,
                category_id=category.id if category else None,
                **data,
            )
            db_session.add(article)
            await db_session.commit()
        return article

    return _make


def _words(count: int) -> str:
    return " ".join(f"w{i}" for i in range(count))


@pytest.fixture
def words():
    """Build content made of ``count`` whitespace-separated words."""
    return _words
