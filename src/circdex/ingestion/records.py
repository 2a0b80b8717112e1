"""Streaming splitter for circulation data files.

The source is a large, loosely structured XML dump. Instead of parsing the
whole file, lines are fed through a two-state marker automaton that cuts the
stream into self-contained ``<item id="N">...</item>`` blocks.
"""

from __future__ import annotations

import codecs
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
import re
from typing import Iterable, Iterator, TextIO

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

SNIFF_BYTES = 64 * 1024

_RECORD_START_RE = re.compile(r'^<item id="\d+">', re.IGNORECASE)
_RECORD_END_RE = re.compile(r"(^</item>|</item>\s*$)", re.IGNORECASE)


@dataclass(slots=True)
class SourceError(Exception):
    """Fatal problem with the circulation data source."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


class SourceMissingError(SourceError):
    """The configured source path is not an existing regular file."""


class SourceUnavailableError(SourceError):
    """The source file exists but cannot be opened for reading."""


class _Marker(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


def iter_record_units(lines: Iterable[str]) -> Iterator[str]:
    """Yield complete record blocks, in source order, from a line stream.

    Lines outside a block are noise and are skipped. A block still open when
    the stream ends is dropped.
    """

    marker = _Marker.OUTSIDE
    buffer: list[str] = []

    for line in lines:
        if marker is _Marker.OUTSIDE:
            if not _RECORD_START_RE.match(line):
                continue
            marker = _Marker.INSIDE
        buffer.append(line)

        if _RECORD_END_RE.search(line):
            yield "".join(buffer)
            buffer = []
            marker = _Marker.OUTSIDE

    if buffer:
        logger.debug("Dropping unterminated record fragment (%d lines)", len(buffer))


def detect_encoding(raw: bytes) -> str:
    """Guess the text encoding of a leading sample of the source.

    A pure ASCII sample says nothing about the rest of the file, so it is
    widened to UTF-8, which reads ASCII unchanged.
    """

    best = from_bytes(raw).best()
    if best and best.encoding:
        if codecs.lookup(best.encoding).name == "ascii":
            return "utf-8"
        return best.encoding

    for fallback in ("utf-8", "cp1252"):
        try:
            raw.decode(fallback)
            return fallback
        except UnicodeDecodeError:
            continue
    return "utf-8"


@contextmanager
def open_source(path: str | Path, *, encoding: str | None = None) -> Iterator[TextIO]:
    """Open a circulation data file as a text line stream.

    Raises:
        SourceMissingError: ``path`` does not reference a regular file.
        SourceUnavailableError: the file cannot be opened or read, or holds
            bytes that are invalid in the chosen encoding.
    """

    source = Path(path)
    if not source.is_file():
        raise SourceMissingError(source, "Source file does not exist")

    try:
        if encoding is None:
            with source.open("rb") as raw:
                encoding = detect_encoding(raw.read(SNIFF_BYTES))
            logger.info("Detected source encoding %s for %s", encoding, source)
        stream = source.open("r", encoding=encoding)
    except (OSError, LookupError) as exc:
        raise SourceUnavailableError(source, f"Unable to open source file: {exc}") from exc

    with stream:
        try:
            yield stream
        except UnicodeDecodeError as exc:
            raise SourceUnavailableError(source, f"Unable to decode source as {encoding}: {exc}") from exc
