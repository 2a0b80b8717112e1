"""Turn one raw record block into a nested field mapping.

Blocks cut from the circulation dump are not guaranteed to be well formed, so
they are parsed with a recovering lxml parser inside a synthetic root. The
resulting tree is flattened into plain mappings: element text lives under a
``value`` key, attributes look like text-only children, and repeated siblings
become lists.
"""

from __future__ import annotations

import re
from typing import Any

from lxml import etree

Node = dict[str, Any]

_ROOT_TAG = "records"

# "&" that does not open a character or entity reference
_BARE_AMPERSAND_RE = re.compile(r"&(?!#?\w+;)")


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=False,
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].lower()


def _attach(node: Node, key: str, child: Node) -> None:
    existing = node.get(key)
    if existing is None:
        node[key] = child
    elif isinstance(existing, list):
        existing.append(child)
    else:
        node[key] = [existing, child]


def _element_to_node(element: etree._Element) -> Node:
    node: Node = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue  # comments, processing instructions
        _attach(node, _local_name(child.tag), _element_to_node(child))

    text = (element.text or "").strip()
    if text and "value" not in node:
        node["value"] = text

    for name, value in element.attrib.items():
        key = _local_name(name)
        if key not in node:
            node[key] = {"value": value}

    return node


def parse_unit(unit: str) -> Node:
    """Parse a raw record block into a ``ParsedRecord`` mapping.

    The block's top-level elements become keys of the returned mapping, so a
    block normally yields ``{"item": {...}}``; a block holding several
    ``<item>`` siblings yields ``{"item": [{...}, {...}]}``.
    Bare ampersands are kept as literal text.
    """

    body = _BARE_AMPERSAND_RE.sub("&amp;", unit)
    root = etree.fromstring(f"<{_ROOT_TAG}>{body}</{_ROOT_TAG}>", parser=_make_parser())
    if root is None:
        return {}
    return _element_to_node(root)


def record_items(parsed: Node) -> list[Any]:
    """Normalize the ``item`` entry of a parsed block to a list.

    A single item is wrapped; a missing item yields ``[None]`` so the block
    still produces one (empty) document.
    """

    items = parsed.get("item")
    if isinstance(items, list):
        return items
    return [items]
