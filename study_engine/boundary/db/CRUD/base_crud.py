"""
Base CRUD operations for SQLAlchemy models.

Model-specific CRUD classes inherit the generic bulk insert and add their
own queries.

Dependencies: sqlalchemy
System role: Foundation for the store's CRUD singletons
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD base.

    Attributes:
        model: SQLAlchemy model class operated on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create_many(self, session: AsyncSession, rows: Sequence[dict[str, Any]]) -> list[ModelT]:
        """
        Add several rows in the caller's transaction and flush.

        Args:
            session: Async database session
            rows: Column values per row

        Returns:
            Created model instances in input order
        """
        instances = [self.model(**row) for row in rows]
        session.add_all(instances)
        await session.flush()
        return instances
