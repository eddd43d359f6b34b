"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_activity_repo import SQLAlchemyActivityRepository
from infrastructure.database.repositories.sqlalchemy_group_repo import SQLAlchemyGroupRepository
from infrastructure.database.repositories.sqlalchemy_task_repo import SQLAlchemyTaskRepository


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy.

    One session per context; repositories are created lazily on top of it.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    @property
    def session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session

    @property
    def groups(self) -> SQLAlchemyGroupRepository:
        """Get group repository."""
        return SQLAlchemyGroupRepository(self.session)

    @property
    def tasks(self) -> SQLAlchemyTaskRepository:
        """Get task repository."""
        return SQLAlchemyTaskRepository(self.session)

    @property
    def activities(self) -> SQLAlchemyActivityRepository:
        """Get activity log repository."""
        return SQLAlchemyActivityRepository(self.session)

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager; uncommitted work is rolled back."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None
