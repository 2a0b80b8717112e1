"""Field lookup over irregularly shaped parsed records."""

from __future__ import annotations

from typing import Any, Mapping

RECORD_FIELDS: tuple[str, ...] = ("copies", "url", "id", "title", "isbn")


def extract(record_item: Any, field_name: str) -> str:
    """Return the text of ``record_item[field_name]``, or ``""``.

    Accepts both ``{"title": {"value": "X"}}`` and the explicit
    ``<title><value>X</value></title>`` form. Any other shape, including a
    missing item, a missing key or a repeated field, yields the empty string.
    """

    if not isinstance(record_item, Mapping):
        return ""
    field = record_item.get(field_name)
    if not isinstance(field, Mapping):
        return ""

    value = field.get("value")
    if isinstance(value, Mapping):
        value = value.get("value")
    return value if isinstance(value, str) else ""
