from __future__ import annotations

from pathlib import Path

import pytest

from circdex.search.config import DEFAULT_INDEX_PATH, DEFAULT_LANGUAGE, IndexerSettings


def test_settings_defaults_from_empty_environment() -> None:
    settings = IndexerSettings.from_env({})

    assert settings.source_path is None
    assert settings.index_path == Path(DEFAULT_INDEX_PATH)
    assert settings.language == DEFAULT_LANGUAGE
    assert settings.source_encoding is None
    assert settings.verbose is False


def test_settings_load_from_env() -> None:
    settings = IndexerSettings.from_env(
        {
            "CIRCDEX_SOURCE_PATH": " /data/circulation_data.xml ",
            "CIRCDEX_INDEX_PATH": "/var/lib/circdex/index.db",
            "CIRCDEX_LANGUAGE": "EN",
            "CIRCDEX_SOURCE_ENCODING": "latin-1",
            "CIRCDEX_VERBOSE": "yes",
        }
    )

    assert settings.source_path == Path("/data/circulation_data.xml")
    assert settings.index_path == Path("/var/lib/circdex/index.db")
    assert settings.language == "en"
    assert settings.source_encoding == "latin-1"
    assert settings.verbose is True


def test_settings_validate_values() -> None:
    with pytest.raises(ValueError, match="CIRCDEX_INDEX_PATH"):
        IndexerSettings.from_env({"CIRCDEX_INDEX_PATH": "  "})

    with pytest.raises(ValueError, match="CIRCDEX_LANGUAGE"):
        IndexerSettings.from_env({"CIRCDEX_LANGUAGE": ""})

    with pytest.raises(ValueError, match="CIRCDEX_VERBOSE"):
        IndexerSettings.from_env({"CIRCDEX_VERBOSE": "maybe"})
