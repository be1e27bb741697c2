"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class TrackedAccountRepository(BaseRepository[TrackedAccount]):
            def __init__(self, session: AsyncSession):
                super().__init__(TrackedAccount, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    @property
    def dialect_name(self) -> str:
        """Name of the bound database dialect (postgresql, sqlite)."""
        return self.session.get_bind().dialect.name

    def insert_statement(self, model: type[Base] | None = None):
        """
        Dialect-specific INSERT supporting ON CONFLICT clauses.

        Args:
            model: Target model (defaults to the repository model)

        Returns:
            PostgreSQL or SQLite Insert construct
        """
        target = model or self.model
        if self.dialect_name == "sqlite":
            return sqlite_insert(target)
        return pg_insert(target)

    def greatest(self, left: Any, right: Any) -> ColumnElement:
        """Scalar maximum of two expressions (GREATEST / max)."""
        if self.dialect_name == "sqlite":
            return func.max(left, right)
        return func.greatest(left, right)

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id)

    async def get_by(
        self, **filters: Any
    ) -> ModelType | None:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0
