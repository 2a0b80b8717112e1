"""Record extraction from circulation data dumps."""

from .fields import RECORD_FIELDS, extract
from .models import IndexDocument
from .parser import parse_unit, record_items
from .records import (
    SourceError,
    SourceMissingError,
    SourceUnavailableError,
    iter_record_units,
    open_source,
)

__all__ = [
    "IndexDocument",
    "RECORD_FIELDS",
    "SourceError",
    "SourceMissingError",
    "SourceUnavailableError",
    "extract",
    "iter_record_units",
    "open_source",
    "parse_unit",
    "record_items",
]
