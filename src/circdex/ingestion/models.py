"""Canonical document shape submitted to the search index."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class IndexDocument:
    """One circulation record prepared for indexing."""

    copies: str = ""
    url: str = ""
    id: str = ""
    title: str = ""
    isbn: str = ""
    phonetic: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
