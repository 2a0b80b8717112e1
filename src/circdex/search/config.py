"""Runtime configuration for circulation indexing."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


DEFAULT_INDEX_PATH = ".circdex-index.db"
DEFAULT_LANGUAGE = "en"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(*, name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    allowed = ", ".join(sorted(_TRUE_VALUES | (_FALSE_VALUES - {""})))
    raise ValueError(f"{name} must be one of: {allowed}")


@dataclass(frozen=True, slots=True)
class IndexerSettings:
    """Validated settings for one indexing run."""

    source_path: Path | None
    index_path: Path
    language: str = DEFAULT_LANGUAGE
    source_encoding: str | None = None
    verbose: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "IndexerSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        source_path_raw = source.get("CIRCDEX_SOURCE_PATH", "").strip()

        index_path_raw = source.get("CIRCDEX_INDEX_PATH", DEFAULT_INDEX_PATH).strip()
        if not index_path_raw:
            raise ValueError("CIRCDEX_INDEX_PATH cannot be empty")

        language = source.get("CIRCDEX_LANGUAGE", DEFAULT_LANGUAGE).strip().lower()
        if not language:
            raise ValueError("CIRCDEX_LANGUAGE cannot be empty")

        encoding = source.get("CIRCDEX_SOURCE_ENCODING", "").strip()
        verbose = _parse_bool(name="CIRCDEX_VERBOSE", raw_value=source.get("CIRCDEX_VERBOSE", ""))

        return cls(
            source_path=Path(source_path_raw) if source_path_raw else None,
            index_path=Path(index_path_raw),
            language=language,
            source_encoding=encoding or None,
            verbose=verbose,
        )
