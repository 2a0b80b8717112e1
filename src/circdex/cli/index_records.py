"""CLI entrypoint for building a circulation record index."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TextIO

from dotenv import load_dotenv

from circdex.ingestion.records import SourceError
from circdex.search.config import IndexerSettings
from circdex.search.indexer import CirculationIndexer
from circdex.search.normalize import AnalyzerInitError
from circdex.search.repository import IndexSessionError

logger = logging.getLogger(__name__)


class ProgressLine:
    """Self-overwriting ``N records processed`` counter on a diagnostic stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def __call__(self, count: int) -> None:
        self._stream.write(f"{count} records processed\r")
        self._stream.flush()

    def finish(self) -> None:
        self._stream.write("\n")
        self._stream.flush()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    try:
        settings = IndexerSettings.from_env()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(description="Index a circulation data dump into SQLite FTS5 storage")
    parser.add_argument("--source", default=settings.source_path, help="Circulation data file (XML dump)")
    parser.add_argument("--index-path", default=settings.index_path, help="Index database path; truncated on every run")
    parser.add_argument("--language", default=settings.language, help="Stopword and stemmer language")
    parser.add_argument("--encoding", default=settings.source_encoding, help="Source encoding (detected when omitted)")
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=settings.verbose,
        help="Print a running record counter to stderr",
    )
    args = parser.parse_args(argv)
    if args.source is None:
        parser.error("--source is required (or set CIRCDEX_SOURCE_PATH)")

    # INFO records would land on top of the progress line on stderr.
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    progress = ProgressLine(sys.stderr) if args.verbose else None
    indexer = CirculationIndexer(
        args.index_path,
        language=args.language,
        encoding=args.encoding,
        progress=progress,
    )
    try:
        stats = indexer.build_from_file(args.source)
    except (SourceError, AnalyzerInitError, IndexSessionError) as exc:
        logger.error("Indexing aborted: %s", exc)
        return 1

    if progress is not None:
        progress.finish()
    print(json.dumps(stats.to_dict(), ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
