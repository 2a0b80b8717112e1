"""SQLite schema and pragmas for the circulation record index."""

from __future__ import annotations

import re
import sqlite3
from typing import Sequence

from circdex.search.session import FieldKind


PRAGMA_BUSY_TIMEOUT_MS = 5000

DOCUMENTS_TABLE = "documents"
ROWID_COLUMN = "doc_no"

_FIELD_NAME_RE = re.compile(r"[a-z_][a-z0-9_]*")

_FTS_TOKENIZERS: dict[FieldKind, str] = {
    FieldKind.FULLTEXT_ANALYZED: "porter unicode61 remove_diacritics 2",
    FieldKind.FULLTEXT_UNSEGMENTED: "unicode61 remove_diacritics 0",
}


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply pragmas for a single-writer bulk load that must survive commit."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=FULL;")


def fts_table_name(field_name: str) -> str:
    return f"{DOCUMENTS_TABLE}_{field_name}_fts"


def validate_fields(fields: Sequence[tuple[str, FieldKind]]) -> None:
    if not fields:
        raise ValueError("Schema must declare at least one field")

    seen: set[str] = set()
    for name, kind in fields:
        if not _FIELD_NAME_RE.fullmatch(name) or name == ROWID_COLUMN:
            raise ValueError(f"Invalid field name: {name!r}")
        if name in seen:
            raise ValueError(f"Duplicate field name: {name!r}")
        if not isinstance(kind, FieldKind):
            raise ValueError(f"Unsupported field kind for {name!r}: {kind!r}")
        seen.add(name)


def build_schema_script(fields: Sequence[tuple[str, FieldKind]]) -> str:
    """Render the DDL for a documents table plus one FTS5 table per searchable field."""

    validate_fields(fields)

    columns = ",\n    ".join(f"{name} TEXT NOT NULL DEFAULT ''" for name, _ in fields)
    statements = [
        f"CREATE TABLE IF NOT EXISTS {DOCUMENTS_TABLE} (\n"
        f"    {ROWID_COLUMN} INTEGER PRIMARY KEY,\n"
        f"    {columns}\n"
        ");"
    ]

    for name, kind in fields:
        tokenizer = _FTS_TOKENIZERS.get(kind)
        if tokenizer is None:
            continue  # opaque: stored, not searchable
        table = fts_table_name(name)
        statements.append(
            f"CREATE VIRTUAL TABLE IF NOT EXISTS {table} USING fts5(\n"
            f"    {name},\n"
            f"    content='{DOCUMENTS_TABLE}',\n"
            f"    content_rowid='{ROWID_COLUMN}',\n"
            f"    tokenize='{tokenizer}'\n"
            ");"
        )
        statements.append(
            f"CREATE TRIGGER IF NOT EXISTS {table}_ai AFTER INSERT ON {DOCUMENTS_TABLE} BEGIN\n"
            f"    INSERT INTO {table}(rowid, {name}) VALUES (new.{ROWID_COLUMN}, new.{name});\n"
            "END;"
        )

    return "\n\n".join(statements)


def ensure_schema(connection: sqlite3.Connection, fields: Sequence[tuple[str, FieldKind]]) -> None:
    """Create the documents table, FTS indexes, and sync triggers if missing."""

    connection.executescript(build_schema_script(fields))
