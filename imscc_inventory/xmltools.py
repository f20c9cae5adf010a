"""Namespace-agnostic ElementTree helpers for Canvas/CC documents."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


def localname(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def parse_xml(text: str) -> ET.Element:
    """Parse a document; ParseError propagates."""
    return ET.fromstring(text.lstrip("\ufeff"))


def parse_xml_or_none(text: Optional[str], label: str = "document") -> Optional[ET.Element]:
    """Parse a per-resource sub-document, logging instead of failing on bad markup."""
    if text is None:
        return None
    try:
        return parse_xml(text)
    except ET.ParseError as e:
        logger.warning("Unparseable XML in %s: %s", label, e)
        return None


def iter_named(el: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield `el` and its descendants whose local tag name is `name`, in document order."""
    for node in el.iter():
        if isinstance(node.tag, str) and localname(node.tag) == name:
            yield node


def element_text(el: Optional[ET.Element]) -> Optional[str]:
    if el is None:
        return None
    return "".join(el.itertext())


def first_text(el: Optional[ET.Element], name: str) -> Optional[str]:
    """Text content of the first element named `name` at or below `el`."""
    if el is None:
        return None
    for node in iter_named(el, name):
        return element_text(node)
    return None


def child_text(el: ET.Element, name: str) -> Optional[str]:
    """Text content of the direct child named `name`."""
    return element_text(el.find("{*}" + name))
