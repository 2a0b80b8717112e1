"""Document preparation and index storage for circulation records."""

from .indexer import CirculationIndexer, IndexRunStats
from .repository import IndexCommitError, IndexSessionError, IndexSubmitError, SQLiteIndexSession
from .session import DOCUMENT_SCHEMA, FieldKind, IndexSession

__all__ = [
    "CirculationIndexer",
    "DOCUMENT_SCHEMA",
    "FieldKind",
    "IndexCommitError",
    "IndexRunStats",
    "IndexSession",
    "IndexSessionError",
    "IndexSubmitError",
    "SQLiteIndexSession",
]
