"""
Generated set CRUD operations.

Dependencies: sqlalchemy, study_engine.boundary.db.models
System role: Generated set queries
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from study_engine.boundary.db.CRUD.base_crud import BaseCRUD
from study_engine.boundary.db.models.set_model import GeneratedSetModel


class GeneratedSetCRUD(BaseCRUD[GeneratedSetModel]):
    """CRUD operations for GeneratedSetModel."""

    def __init__(self) -> None:
        """Initialize GeneratedSetCRUD with GeneratedSetModel."""
        super().__init__(GeneratedSetModel)

    async def get_with_items(self, session: AsyncSession, set_id: UUID) -> GeneratedSetModel | None:
        """
        Retrieve a set with its items eagerly loaded in position order.

        Args:
            session: Async database session
            set_id: Set UUID

        Returns:
            GeneratedSetModel if found, None otherwise
        """
        stmt = (
            select(GeneratedSetModel)
            .where(GeneratedSetModel.id == set_id)
            .options(selectinload(GeneratedSetModel.items))
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_with_items(self, session: AsyncSession, set_id: UUID) -> bool:
        """
        Delete a set and its items, then flush.

        Args:
            session: Async database session
            set_id: Set UUID

        Returns:
            True if the set was deleted, False if not found
        """
        row = await self.get_with_items(session, set_id)
        if row is None:
            return False
        await session.delete(row)
        await session.flush()
        return True


generated_set_crud = GeneratedSetCRUD()
