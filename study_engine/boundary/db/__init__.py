"""
Database boundary.

Async SQLAlchemy models, CRUD operations and the study store.
"""

from study_engine.boundary.db.base import Base
from study_engine.boundary.db.store import SqlAlchemyStudyStore, StudyStore

__all__ = ["Base", "SqlAlchemyStudyStore", "StudyStore"]
