"""SQLite FTS5 backend implementing the index session contract."""

from __future__ import annotations

import logging
from pathlib import Path
import sqlite3
from typing import Mapping, Sequence

from circdex.search.schema import (
    DOCUMENTS_TABLE,
    ROWID_COLUMN,
    apply_runtime_pragmas,
    ensure_schema,
)
from circdex.search.session import FieldKind

logger = logging.getLogger(__name__)

_SIDE_FILE_SUFFIXES = ("-wal", "-shm", "-journal")


class IndexSessionError(RuntimeError):
    """Failure reported by the index backend; the run must abort."""


class IndexOpenError(IndexSessionError):
    pass


class IndexSubmitError(IndexSessionError):
    pass


class IndexCommitError(IndexSessionError):
    pass


def _truncate_index(path: Path) -> None:
    if path.is_dir():
        raise IndexOpenError(f"Index location is a directory: {path}")

    for candidate in [path, *(path.with_name(path.name + suffix) for suffix in _SIDE_FILE_SUFFIXES)]:
        if candidate.exists():
            candidate.unlink()
            logger.info("Removed existing index file %s", candidate)


class SQLiteIndexSession:
    """Write session over a SQLite database with FTS5 field indexes."""

    def __init__(self, index_path: str | Path, *, truncate: bool = True) -> None:
        self._index_path = Path(index_path)
        self._fields: tuple[str, ...] = ()
        try:
            if truncate:
                _truncate_index(self._index_path)
            self._connection = sqlite3.connect(str(self._index_path))
            self._connection.row_factory = sqlite3.Row
            apply_runtime_pragmas(self._connection)
        except (OSError, sqlite3.Error) as exc:
            raise IndexOpenError(f"Unable to open index at {self._index_path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    @property
    def fields(self) -> tuple[str, ...]:
        return self._fields

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "SQLiteIndexSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def define_schema(self, fields: Sequence[tuple[str, FieldKind]]) -> None:
        if self._fields:
            raise IndexOpenError("Schema is already defined for this session")
        try:
            ensure_schema(self._connection, fields)
        except sqlite3.Error as exc:
            raise IndexOpenError(f"Unable to create index schema: {exc}") from exc
        self._fields = tuple(name for name, _ in fields)

    def submit(self, document: Mapping[str, str]) -> None:
        if not self._fields:
            raise IndexSubmitError("define_schema() must be called before submit()")

        unknown = set(document) - set(self._fields)
        if unknown:
            raise IndexSubmitError(f"Document has fields outside the schema: {sorted(unknown)}")

        columns = ", ".join(self._fields)
        placeholders = ", ".join("?" for _ in self._fields)
        try:
            self._connection.execute(
                f"INSERT INTO {DOCUMENTS_TABLE}({columns}) VALUES({placeholders})",
                tuple(document.get(name, "") for name in self._fields),
            )
        except sqlite3.Error as exc:
            raise IndexSubmitError(f"Failed to submit document: {exc}") from exc

    def commit(self) -> None:
        try:
            self._connection.commit()
        except sqlite3.Error as exc:
            raise IndexCommitError(f"Failed to commit index at {self._index_path}: {exc}") from exc
        logger.info("Committed index at %s", self._index_path)

    def fetch_documents(self, *, limit: int | None = None, offset: int = 0) -> list[dict[str, str]]:
        """Return stored documents in submission order."""

        if offset < 0:
            raise ValueError("offset cannot be negative")
        if limit is not None and limit <= 0:
            raise ValueError("limit must be positive")

        columns = ", ".join(self._fields) if self._fields else "*"
        rows = self._connection.execute(
            f"""
            SELECT {columns}
            FROM {DOCUMENTS_TABLE}
            ORDER BY {ROWID_COLUMN} ASC
            LIMIT ? OFFSET ?
            """,
            (-1 if limit is None else limit, offset),
        ).fetchall()
        return [{key: row[key] for key in row.keys() if key != ROWID_COLUMN} for row in rows]
