from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from circdex.search.repository import IndexOpenError, IndexSubmitError, SQLiteIndexSession
from circdex.search.schema import fts_table_name
from circdex.search.session import DOCUMENT_SCHEMA, FieldKind, IndexSession


def _document(**overrides: str) -> dict[str, str]:
    document = {"copies": "2", "url": "http://example.org/1", "id": "1", "title": "", "isbn": "", "phonetic": ""}
    document.update(overrides)
    return document


def _open(path: Path) -> SQLiteIndexSession:
    session = SQLiteIndexSession(path)
    session.define_schema(DOCUMENT_SCHEMA)
    return session


def test_session_satisfies_protocol(tmp_path: Path) -> None:
    with SQLiteIndexSession(tmp_path / "index.db") as session:
        assert isinstance(session, IndexSession)


def test_schema_creates_fts_tables_only_for_searchable_fields(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        names = {
            row["name"]
            for row in session.connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        }

        assert "documents" in names
        assert fts_table_name("title") in names
        assert fts_table_name("phonetic") in names
        assert fts_table_name("isbn") not in names
        assert fts_table_name("id") not in names
        assert session.fields == ("id", "url", "isbn", "title", "copies", "phonetic")


def test_title_field_is_case_folded_stemmed_and_highlightable(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        session.submit(_document(title="Running Dogs of the North"))
        session.commit()

        table = fts_table_name("title")
        rows = session.connection.execute(
            f"SELECT rowid FROM {table} WHERE {table} MATCH ?",
            ("run AND DOG",),
        ).fetchall()
        assert len(rows) == 1

        highlighted = session.connection.execute(
            f"SELECT highlight({table}, 0, '[', ']') AS marked FROM {table} WHERE {table} MATCH ?",
            ("north",),
        ).fetchone()
        assert highlighted["marked"] == "Running Dogs of the [North]"


def test_phonetic_field_matches_whole_codes(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        session.submit(_document(phonetic="KRT KTSP"))
        session.commit()

        table = fts_table_name("phonetic")
        hits = session.connection.execute(f"SELECT rowid FROM {table} WHERE {table} MATCH ?", ("KTSP",)).fetchall()
        misses = session.connection.execute(f"SELECT rowid FROM {table} WHERE {table} MATCH ?", ("KTS",)).fetchall()

        assert len(hits) == 1
        assert misses == []


def test_opaque_fields_are_stored_verbatim(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        session.submit(_document(isbn="0-14-143951-3", copies="12"))
        session.commit()

        documents = session.fetch_documents()

    assert documents == [_document(isbn="0-14-143951-3", copies="12")]


def test_documents_are_not_visible_before_commit(tmp_path: Path) -> None:
    index_path = tmp_path / "index.db"
    with _open(index_path) as session:
        session.submit(_document(title="Pending"))

        reader = sqlite3.connect(str(index_path))
        try:
            before = reader.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
            session.commit()
            after = reader.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
        finally:
            reader.close()

    assert before == 0
    assert after == 1


def test_uncommitted_documents_are_discarded_on_close(tmp_path: Path) -> None:
    index_path = tmp_path / "index.db"
    with _open(index_path) as session:
        session.submit(_document(title="Committed"))
        session.commit()
        session.submit(_document(title="Dropped"))

    with SQLiteIndexSession(index_path, truncate=False) as reopened:
        titles = [document["title"] for document in reopened.fetch_documents()]

    assert titles == ["Committed"]


def test_truncate_mode_destroys_previous_index(tmp_path: Path) -> None:
    index_path = tmp_path / "index.db"
    with _open(index_path) as session:
        session.submit(_document(title="Old"))
        session.commit()

    with _open(index_path) as session:
        assert session.fetch_documents() == []


def test_fetch_documents_supports_paging(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        for number in range(1, 6):
            session.submit(_document(id=str(number)))
        session.commit()

        page = session.fetch_documents(limit=2, offset=1)

        assert [document["id"] for document in page] == ["2", "3"]
        with pytest.raises(ValueError, match="limit"):
            session.fetch_documents(limit=0)


def test_submit_rejects_unknown_fields_and_missing_schema(tmp_path: Path) -> None:
    with SQLiteIndexSession(tmp_path / "index.db") as session:
        with pytest.raises(IndexSubmitError, match="define_schema"):
            session.submit(_document())

        session.define_schema(DOCUMENT_SCHEMA)
        with pytest.raises(IndexSubmitError, match="author"):
            session.submit({"author": "Austen"})


def test_schema_validation_rejects_bad_field_declarations(tmp_path: Path) -> None:
    with SQLiteIndexSession(tmp_path / "index.db") as session:
        with pytest.raises(ValueError, match="Duplicate"):
            session.define_schema([("title", FieldKind.OPAQUE), ("title", FieldKind.OPAQUE)])
        with pytest.raises(ValueError, match="Invalid field name"):
            session.define_schema([("title; DROP", FieldKind.OPAQUE)])


def test_schema_can_only_be_defined_once(tmp_path: Path) -> None:
    with _open(tmp_path / "index.db") as session:
        with pytest.raises(IndexOpenError, match="already defined"):
            session.define_schema(DOCUMENT_SCHEMA)


def test_directory_index_location_is_refused(tmp_path: Path) -> None:
    target = tmp_path / "index-dir"
    target.mkdir()

    with pytest.raises(IndexOpenError, match="directory"):
        SQLiteIndexSession(target)

    assert target.is_dir()
