"""
Material chunk CRUD operations.

Dependencies: sqlalchemy, study_engine.boundary.db.models
System role: Chunk persistence queries
"""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.boundary.db.CRUD.base_crud import BaseCRUD
from study_engine.boundary.db.models.chunk_model import MaterialChunkModel


class MaterialChunkCRUD(BaseCRUD[MaterialChunkModel]):
    """CRUD operations for MaterialChunkModel with material-scoped queries."""

    def __init__(self) -> None:
        """Initialize MaterialChunkCRUD with MaterialChunkModel."""
        super().__init__(MaterialChunkModel)

    async def get_by_material_ids(
        self,
        session: AsyncSession,
        material_ids: Sequence[str],
    ) -> Sequence[MaterialChunkModel]:
        """
        Retrieve chunks of the given materials ordered by material and index.

        Args:
            session: Async database session
            material_ids: Material identifiers

        Returns:
            Sequence of chunk rows
        """
        if not material_ids:
            return []
        stmt = (
            select(MaterialChunkModel)
            .where(MaterialChunkModel.material_id.in_(list(material_ids)))
            .order_by(MaterialChunkModel.material_id, MaterialChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_material_ids(self, session: AsyncSession, material_ids: Sequence[str]) -> int:
        """
        Delete every chunk of the given materials.

        Returns:
            Number of deleted rows
        """
        if not material_ids:
            return 0
        stmt = delete(MaterialChunkModel).where(MaterialChunkModel.material_id.in_(list(material_ids)))
        result = await session.execute(stmt)
        return result.rowcount


material_chunk_crud = MaterialChunkCRUD()
