"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

OWNER = TokenUser(
    id="auth0|owner",
    email="owner@example.com",
    display_name="Olive Owner",
)
ALICE = TokenUser(
    id="auth0|alice",
    email="alice@example.com",
    display_name="Alice Adams",
)
BOB = TokenUser(
    id="auth0|bob",
    email="bob@example.com",
    display_name="Bob Brown",
)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test; StaticPool shares its one connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def test_user() -> TokenUser:
    """The default caller: owner of the groups created in tests."""
    return OWNER


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
        issuer="",
        audience="",
        jwks_url="",
    )


@pytest.fixture
def headers_for(auth_provider: JWTAuthProvider) -> Callable[[TokenUser], dict[str, str]]:
    """Build Authorization headers carrying a real token for any user."""

    def build(user: TokenUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(user)}"}

    return build


@pytest.fixture
def auth_headers(
    headers_for: Callable[[TokenUser], dict[str, str]], test_user: TokenUser
) -> dict[str, str]:
    """Create authorization headers for the default caller."""
    return headers_for(test_user)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth, no database)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
) -> FastAPI:
    """
    Create an app wired to the test database.

    - Tokens are validated by the test auth provider, so each request acts
      as whichever user its Authorization header names
    - Services run on Units of Work bound to the in-memory database
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        build_group_service,
        get_activity_service,
        get_group_service,
        get_task_service,
    )
    from domain.services.activity_service import ActivityService
    from domain.services.task_service import TaskService
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    activity_service = ActivityService(uow_factory)
    task_service = TaskService(uow_factory, activity_service=activity_service)
    group_service = build_group_service(
        uow_factory, task_service=task_service, activity_service=activity_service
    )

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_activity_service] = lambda: activity_service
    app.dependency_overrides[get_task_service] = lambda: task_service
    app.dependency_overrides[get_group_service] = lambda: group_service
    app.dependency_overrides[get_async_session] = override_get_async_session
    return app


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async client for the database-backed app; pass headers per request."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    app: FastAPI, auth_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Async client acting as the default caller."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c
    app.dependency_overrides.clear()
