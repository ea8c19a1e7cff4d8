"""CRUD operations for the study engine tables."""

from study_engine.boundary.db.CRUD.base_crud import BaseCRUD
from study_engine.boundary.db.CRUD.chunk_crud import MaterialChunkCRUD, material_chunk_crud
from study_engine.boundary.db.CRUD.set_crud import GeneratedSetCRUD, generated_set_crud

__all__ = [
    "BaseCRUD",
    "GeneratedSetCRUD",
    "MaterialChunkCRUD",
    "generated_set_crud",
    "material_chunk_crud",
]
