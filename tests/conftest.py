"""Pytest configuration and fixtures for the authorization engine.

Env is set before any authz import so Settings validates. DB-backed tests
run against a file-based SQLite database per test (aiosqlite); the schema
comes from Base.metadata. HTTP tests use authz.main:app over ASGITransport
with get_db / get_db_session_factory overridden to that database.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["REDIS_ENABLED"] = "false"

from collections.abc import AsyncIterator, Callable  # noqa: E402
from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event, select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authz.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from authz.api.v1.dependencies import get_db_session_factory  # noqa: E402
from authz.core.limiter import limiter  # noqa: E402
from authz.infrastructure.persistence.database import Base, get_db  # noqa: E402
from authz.infrastructure.persistence.models import Action, Resource, Role  # noqa: E402
from authz.infrastructure.security.jwt import create_access_token  # noqa: E402
from authz.infrastructure.services import RbacSeedService  # noqa: E402
from authz.main import app  # noqa: E402


@dataclass(frozen=True)
class SeedIds:
    """Ids of the default vocabulary, keyed by name."""

    roles: dict[str, int]
    resources: dict[str, int]
    actions: dict[str, int]


@pytest.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """Fresh SQLite database with the full schema."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'authz.db'}")

    @event.listens_for(eng.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session for repository tests. Rolled back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> SeedIds:
    """Seed default roles, resources, actions and grants; return their ids."""
    async with session_factory() as session:
        async with session.begin():
            await RbacSeedService(session).seed()
        roles = dict((await session.execute(select(Role.name, Role.id))).tuples().all())
        resources = dict(
            (await session.execute(select(Resource.name, Resource.id))).tuples().all()
        )
        actions = dict((await session.execute(select(Action.name, Action.id))).tuples().all())
    return SeedIds(roles=roles, resources=resources, actions=actions)


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI), bound to the test database."""

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_db_session_factory] = lambda: session_factory
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def bearer(seeded: SeedIds) -> Callable[..., dict[str, str]]:
    """Build Authorization headers for a user holding one of the seeded roles."""

    def _headers(role: str, user_id: int = 1, team_id: int | None = None) -> dict[str, str]:
        token = create_access_token(
            {
                "sub": str(user_id),
                "role_id": seeded.roles[role],
                "team_id": team_id,
                "name": f"{role} user",
                "email": f"{role}@example.com",
            }
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
