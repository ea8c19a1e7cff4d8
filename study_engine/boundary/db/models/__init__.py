"""ORM models."""

from study_engine.boundary.db.models.chunk_model import MaterialChunkModel
from study_engine.boundary.db.models.set_model import GeneratedItemModel, GeneratedSetModel

__all__ = ["GeneratedItemModel", "GeneratedSetModel", "MaterialChunkModel"]
