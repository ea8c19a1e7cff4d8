"""
Study store.

Persists material chunks and generated sets through the async SQLAlchemy
session, converting between ORM rows and domain models. A generated set
and its items are written in one transaction.

Dependencies: sqlalchemy, study_engine.boundary.db.CRUD
System role: Persistence boundary for ingestion and generation services
"""

import logging
from typing import Protocol, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_engine.boundary.db.CRUD import generated_set_crud, material_chunk_crud
from study_engine.boundary.db.models import GeneratedItemModel, GeneratedSetModel, MaterialChunkModel
from study_engine.core.chunking.metadata import estimate_token_count
from study_engine.core.exceptions import StoreError
from study_engine.core.models import (
    Chunk,
    ChunkMetadata,
    ContentType,
    Difficulty,
    GeneratedSet,
    GenerationStats,
    ItemType,
    SetKind,
    candidate_item_adapter,
)

logger = logging.getLogger(__name__)


class StudyStore(Protocol):
    """Persistence operations used by the services."""

    async def insert_material_chunks(self, chunks: Sequence[Chunk]) -> int: ...

    async def insert_generated_set(self, generated_set: GeneratedSet) -> UUID: ...

    async def get_chunks_by_material_ids(self, material_ids: Sequence[str]) -> list[Chunk]: ...

    async def get_generated_set(self, set_id: UUID) -> GeneratedSet | None: ...

    async def delete_generated_set(self, set_id: UUID) -> bool: ...


def chunk_to_row(chunk: Chunk) -> dict:
    return {
        "id": chunk.id,
        "material_id": chunk.material_id,
        "chunk_index": chunk.index,
        "content": chunk.content,
        "content_type": chunk.content_type.value,
        "has_math": chunk.has_math,
        "embedding": chunk.embedding,
        "token_count": estimate_token_count(chunk.content),
        "chunk_metadata": chunk.metadata.model_dump(mode="json"),
    }


def row_to_chunk(row: MaterialChunkModel) -> Chunk:
    return Chunk(
        id=row.id,
        material_id=row.material_id,
        index=row.chunk_index,
        content=row.content,
        content_type=ContentType(row.content_type),
        has_math=row.has_math,
        embedding=row.embedding,
        metadata=ChunkMetadata.model_validate(row.chunk_metadata or {}),
    )


def row_to_generated_set(row: GeneratedSetModel) -> GeneratedSet:
    return GeneratedSet(
        id=row.id,
        name=row.name,
        kind=SetKind(row.kind),
        item_type=ItemType(row.item_type),
        difficulty=Difficulty(row.difficulty),
        description=row.description,
        items=[candidate_item_adapter.validate_python(item.payload) for item in row.items],
        stats=GenerationStats.model_validate(row.stats),
        created_at=row.created_at,
    )


class SqlAlchemyStudyStore:
    """StudyStore over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize store.

        Args:
            db: Async database session
        """
        self.db = db

    async def insert_material_chunks(self, chunks: Sequence[Chunk]) -> int:
        """
        Store chunks, replacing any earlier chunks of the same materials.

        Args:
            chunks: Chunks to store

        Returns:
            int: Number of stored chunks

        Raises:
            StoreError: On database failure (transaction rolled back)
        """
        if not chunks:
            return 0
        material_ids = list(dict.fromkeys(c.material_id for c in chunks))
        try:
            await material_chunk_crud.delete_by_material_ids(self.db, material_ids)
            await material_chunk_crud.create_many(self.db, [chunk_to_row(c) for c in chunks])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:insert_material_chunks - Insert failed: {e}")
            raise StoreError(
                "Failed to store material chunks",
                operation="insert_material_chunks",
                details={"materials": material_ids},
            ) from e

        logger.info(f"{__name__}:insert_material_chunks - Stored {len(chunks)} chunks")
        return len(chunks)

    async def insert_generated_set(self, generated_set: GeneratedSet) -> UUID:
        """
        Store a generated set and all of its items in one transaction.

        Args:
            generated_set: Set to store

        Returns:
            UUID: Id of the stored set

        Raises:
            StoreError: On database failure (nothing is stored)
        """
        set_row = GeneratedSetModel(
            id=generated_set.id,
            name=generated_set.name,
            kind=generated_set.kind.value,
            item_type=generated_set.item_type.value,
            difficulty=generated_set.difficulty.value,
            description=generated_set.description,
            stats=generated_set.stats.model_dump(mode="json"),
            created_at=generated_set.created_at,
            items=[
                GeneratedItemModel(
                    position=position,
                    item_type=item.item_type,
                    payload=item.model_dump(mode="json"),
                    source_chunk_ids=list(item.source_chunk_ids),
                )
                for position, item in enumerate(generated_set.items)
            ],
        )
        try:
            self.db.add(set_row)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:insert_generated_set - Insert failed: {e}")
            raise StoreError(
                "Failed to store generated set",
                operation="insert_generated_set",
                details={"set_id": str(generated_set.id), "items": len(generated_set.items)},
            ) from e

        logger.info(
            f"{__name__}:insert_generated_set - Stored set {generated_set.id} "
            f"with {len(generated_set.items)} items"
        )
        return generated_set.id

    async def get_chunks_by_material_ids(self, material_ids: Sequence[str]) -> list[Chunk]:
        """
        Load chunks of the given materials in request order, then chunk index.

        Raises:
            StoreError: On database failure
        """
        try:
            rows = await material_chunk_crud.get_by_material_ids(self.db, material_ids)
        except SQLAlchemyError as e:
            raise StoreError("Failed to load chunks", operation="get_chunks_by_material_ids") from e

        order = {material_id: i for i, material_id in enumerate(material_ids)}
        rows = sorted(rows, key=lambda r: (order.get(r.material_id, len(order)), r.chunk_index))
        return [row_to_chunk(row) for row in rows]

    async def get_generated_set(self, set_id: UUID) -> GeneratedSet | None:
        """
        Load a generated set with its items.

        Returns:
            GeneratedSet if found, None otherwise

        Raises:
            StoreError: On database failure
        """
        try:
            row = await generated_set_crud.get_with_items(self.db, set_id)
        except SQLAlchemyError as e:
            raise StoreError("Failed to load generated set", operation="get_generated_set") from e
        if row is None:
            return None
        return row_to_generated_set(row)

    async def delete_generated_set(self, set_id: UUID) -> bool:
        """
        Delete a generated set and its items in one transaction.

        Args:
            set_id: Set UUID

        Returns:
            bool: True if the set existed and was deleted

        Raises:
            StoreError: On database failure (transaction rolled back)
        """
        try:
            deleted = await generated_set_crud.delete_with_items(self.db, set_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:delete_generated_set - Delete failed: {e}")
            raise StoreError(
                "Failed to delete generated set",
                operation="delete_generated_set",
                details={"set_id": str(set_id)},
            ) from e

        if deleted:
            logger.info(f"{__name__}:delete_generated_set - Deleted set {set_id}")
        else:
            logger.warning(f"{__name__}:delete_generated_set - Set {set_id} not found")
        return deleted
