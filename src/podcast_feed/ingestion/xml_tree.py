"""
XML-to-tree parsing for podcast feeds.

Turns raw feed XML into plain nested dictionaries keyed by the literal tag
names the publisher used -- ``itunes:image``, ``media:content``,
``content:encoded`` -- so the extraction rules can address podcast dialect
tags directly instead of going through resolved namespace URIs.

Shape of the tree:

- an element with only text becomes a string (trimmed)
- an element with attributes or children becomes a dict; attributes and
  child elements share the same dict, and any text goes under ``#text``
- an element that repeats under the same parent becomes a list

Because a tag may be a single value in one feed and a list in the next,
extraction code never indexes the tree directly: it goes through
``first()`` / ``as_list()`` / ``text_of()`` / ``attr()`` below.
"""

import logging
from typing import Any, Dict, List, Union
from xml.dom import Node as DOMNode
from xml.parsers.expat import ExpatError

from defusedxml import DefusedXmlException
from defusedxml.expatbuilder import parseString

from podcast_feed.exceptions import ParseError

logger = logging.getLogger(__name__)

# A parsed element is either trimmed text or a mapping of attributes/children
Node = Dict[str, Any]
NodeValue = Union[str, Node, List[Union[str, Node]]]

TEXT_KEY = "#text"
TEXT_NODE_TYPES = (DOMNode.TEXT_NODE, DOMNode.CDATA_SECTION_NODE)


# ---------------------------------------------------------------------------
#  Parsing
# ---------------------------------------------------------------------------

def parse_feed_xml(source: Union[str, bytes]) -> Node:
    """
    Parse feed XML into a tree of dicts, lists and strings.

    Namespace processing is switched off, so a tag keeps the qualified name
    written in the document (``itunes:image``) whether or not the feed
    declares the prefix.

    Args:
        source: Feed document as text or raw bytes. Bytes are preferred
            when they come straight off the wire, since the XML declaration's
            encoding is then honoured.

    Returns:
        Single-key dict mapping the root tag (usually ``rss``) to its value

    Raises:
        ParseError: If the document is not well-formed, or uses entity
            declarations that defusedxml refuses to expand

    Example:
        >>> tree = parse_feed_xml('<rss><channel><title>Show</title></channel></rss>')
        >>> tree["rss"]["channel"]["title"]
        'Show'
    """
    try:
        document = parseString(source, namespaces=False)
    except (ExpatError, DefusedXmlException) as exc:
        raise ParseError(f"Malformed feed XML: {exc}") from exc

    root = document.documentElement
    try:
        return {root.tagName: _element_value(root)}
    finally:
        document.unlink()


def _is_namespace_declaration(name: str) -> bool:
    return name == "xmlns" or name.startswith("xmlns:")


def _add_value(node: Node, key: str, value: NodeValue) -> None:
    """Insert a value, turning repeated keys into an ordered list."""
    if key not in node:
        node[key] = value
    elif isinstance(node[key], list):
        node[key].append(value)
    else:
        node[key] = [node[key], value]


def _element_value(element) -> NodeValue:
    node: Node = {}
    for name, attr_value in element.attributes.items():
        if not _is_namespace_declaration(name):
            _add_value(node, name, attr_value)

    text_parts = []
    for sub in element.childNodes:
        if sub.nodeType == DOMNode.ELEMENT_NODE:
            _add_value(node, sub.tagName, _element_value(sub))
        elif sub.nodeType in TEXT_NODE_TYPES:
            text_parts.append(sub.data)

    text = "".join(text_parts).strip()
    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


# ---------------------------------------------------------------------------
#  Cardinality helpers
# ---------------------------------------------------------------------------

def as_list(value: Any) -> List[Any]:
    """Coerce a tree value to a list (``None`` gives an empty list)."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def first(value: Any) -> Any:
    """Coerce a tree value to its first occurrence, or ``None`` if empty."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def child(node: Any, name: str) -> Any:
    """Look up a child tag or attribute; non-mapping nodes have no children."""
    node = first(node)
    if isinstance(node, dict):
        return node.get(name)
    return None


def text_of(value: Any) -> str:
    """Return the text content of a tree value."""
    value = first(value)
    if value is None:
        return ""
    if isinstance(value, dict):
        return text_of(value.get(TEXT_KEY))
    return str(value)


def attr(node: Any, name: str) -> str:
    """Return the text of an attribute or sub-element, or ``""``."""
    return text_of(child(node, name))


def find_channel(tree: Node) -> Node:
    """
    Locate the channel node of a parsed feed.

    Accepts both the usual ``<rss><channel>`` layout and a bare
    ``<channel>`` root. A feed without a channel yields an empty dict,
    which the extractors turn into all-default metadata.
    """
    rss = child(tree, "rss")
    channel = child(rss, "channel") if rss is not None else child(tree, "channel")
    channel = first(channel)
    if isinstance(channel, dict):
        return channel
    logger.debug("Feed has no channel element; using empty channel")
    return {}
