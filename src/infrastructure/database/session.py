"""Database engine and session factory."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.debug}
    if url.startswith("sqlite"):
        # Local development against a file; no pool tuning applies.
        return options

    options["pool_pre_ping"] = True
    # Poolers in transaction mode (PgBouncer, Supavisor) break asyncpg's
    # prepared statement cache.
    if "pooler" in url or "pgbouncer" in url:
        options["connect_args"] = {"statement_cache_size": 0}
    return options


engine = create_async_engine(
    settings.async_database_url, **_engine_options(settings.async_database_url)
)

# Repositories may map rows to entities after commit, so loaded
# attributes must survive it.
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; used by the health probe."""
    async with async_session_factory() as session:
        yield session
