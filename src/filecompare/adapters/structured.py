from __future__ import annotations

from typing import Any
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET
import yaml

from ..detection import FormatKind
from ..serialization import parse_json_lenient, stable_stringify
from .base import StructuredAdapter

ATTRIBUTE_PREFIX = "@_"
TEXT_KEY = "#text"


class JSONAdapter(StructuredAdapter):
    kind = FormatKind.JSON

    def render(self, raw: str) -> str:
        return stable_stringify(parse_json_lenient(raw))


class YAMLAdapter(StructuredAdapter):
    kind = FormatKind.YAML

    def render(self, raw: str) -> str:
        return stable_stringify(yaml.safe_load(raw))


def _local_name(tag: str) -> str:
    # ElementTree spells namespaced tags "{uri}name"
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def element_to_data(element: Element) -> Any:
    """Convert an element into nested dicts, lists and untrimmed strings.

    Attributes are stored under ``@_``-prefixed keys and repeated child tags
    collapse into lists. Text sharing an element with attributes or children
    is kept under ``#text``; whitespace-only text between child elements is
    dropped.
    """
    node: dict[str, Any] = {}
    for key, value in element.attrib.items():
        node[ATTRIBUTE_PREFIX + _local_name(key)] = value

    text_parts: list[str] = []
    if element.text:
        text_parts.append(element.text)

    for child in element:
        name = _local_name(child.tag)
        value = element_to_data(child)
        if name in node:
            existing = node[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[name] = [existing, value]
        else:
            node[name] = value
        if child.tail:
            text_parts.append(child.tail)

    text = "".join(text_parts)
    has_children = len(element) > 0
    if has_children and not text.strip():
        text = ""

    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml(raw: str) -> dict[str, Any]:
    root = ET.fromstring(raw)
    return {_local_name(root.tag): element_to_data(root)}


class XMLAdapter(StructuredAdapter):
    kind = FormatKind.XML

    def render(self, raw: str) -> str:
        return stable_stringify(parse_xml(raw))


__all__ = ["JSONAdapter", "XMLAdapter", "YAMLAdapter", "element_to_data", "parse_xml"]
