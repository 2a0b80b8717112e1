"""Contract between the document pipeline and a full-text index backend."""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Protocol, Sequence, runtime_checkable


class FieldKind(str, Enum):
    OPAQUE = "opaque"
    FULLTEXT_ANALYZED = "fulltext-analyzed"
    FULLTEXT_UNSEGMENTED = "fulltext-unsegmented"


DOCUMENT_SCHEMA: tuple[tuple[str, FieldKind], ...] = (
    ("id", FieldKind.OPAQUE),
    ("url", FieldKind.OPAQUE),
    ("isbn", FieldKind.OPAQUE),
    ("title", FieldKind.FULLTEXT_ANALYZED),
    ("copies", FieldKind.OPAQUE),
    ("phonetic", FieldKind.FULLTEXT_UNSEGMENTED),
)


@runtime_checkable
class IndexSession(Protocol):
    """Write-only view of an index opened in create/truncate mode."""

    def define_schema(self, fields: Sequence[tuple[str, FieldKind]]) -> None:
        """Declare stored and searchable fields; called once before any submit."""

    def submit(self, document: Mapping[str, str]) -> None:
        """Queue one document. Not durable until :meth:`commit` returns."""

    def commit(self) -> None:
        """Durably persist every document submitted so far."""

    def close(self) -> None:
        """Release the backend; uncommitted documents are discarded."""
