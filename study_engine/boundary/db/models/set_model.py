"""
Generated set ORM models.

A generated set owns its ordered items; deleting a set deletes its items.

Dependencies: sqlalchemy, study_engine.boundary.db.base
System role: Persistence of generated quizzes and flashcard decks
"""

import uuid

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from study_engine.boundary.db.base import Base, TimestampMixin, UUIDMixin


class GeneratedSetModel(Base, UUIDMixin, TimestampMixin):
    """
    Generated set ORM model.

    Attributes:
        id: UUID primary key (the GeneratedSet id)
        name: Display name
        kind: "quiz" or "flashcards"
        item_type: Item type of every item in the set
        difficulty: Requested difficulty profile
        description: Optional description
        stats: Generation statistics
        items: Items ordered by position
    """

    __tablename__ = "generated_sets"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stats: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    items: Mapped[list["GeneratedItemModel"]] = relationship(
        back_populates="generated_set",
        cascade="all, delete-orphan",
        order_by="GeneratedItemModel.position",
    )


class GeneratedItemModel(Base, UUIDMixin, TimestampMixin):
    """
    Generated item ORM model.

    Attributes:
        set_id: Owning set (cascade delete)
        position: Order within the set
        item_type: Variant tag of the payload
        payload: Full item as JSON
        source_chunk_ids: Chunks the item was generated from
    """

    __tablename__ = "generated_items"

    set_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("generated_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    source_chunk_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    generated_set: Mapped[GeneratedSetModel] = relationship(back_populates="items")
