"""Deterministic serialization of structured documents.

JSON, YAML and XML inputs are all reduced to the same canonical text: the
parsed value rendered as pretty-printed JSON with every object's keys sorted.
Two documents that differ only in key order therefore produce identical text.
"""

from __future__ import annotations

import json
import math
import re
import unicodedata
from datetime import date, datetime, time, timezone
from typing import Any

CIRCULAR_MARKER = "[Circular]"

# Deeper documents are rejected before the interpreter recursion limit is hit.
MAX_DEPTH = 256

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


# Root collation order of the ASCII punctuation and symbol characters.
_PUNCTUATION_ORDER = {char: rank for rank, char in enumerate("_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$")}


def locale_sort_key(key: str) -> tuple[Any, ...]:
    """Order keys the way a root-locale ``localeCompare`` does.

    Base characters are compared first: whitespace, then punctuation and
    symbols, then digits, then letters without regard to case. Accents break
    ties next and case last, with lowercase first.
    """
    primary: list[tuple[int, int, str]] = []
    accents: list[str] = []
    cases: list[int] = []
    for char in key:
        decomposed = unicodedata.normalize("NFD", char)
        base, marks = decomposed[0], decomposed[1:]
        if base.isspace():
            primary.append((0, 0, base))
        elif base in _PUNCTUATION_ORDER:
            primary.append((1, _PUNCTUATION_ORDER[base], ""))
        elif base.isdigit():
            primary.append((2, unicodedata.digit(base, 0), base))
        elif base.isalpha():
            primary.append((3, 0, base.casefold()))
        else:
            primary.append((1, len(_PUNCTUATION_ORDER), base))
        accents.append(marks)
        cases.append(1 if base.isupper() else 0)
    return tuple(primary), tuple(accents), tuple(cases), key



def _key_text(key: Any) -> str:
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, float):
        return _number_text(key)
    if isinstance(key, (date, datetime)):
        return _iso_timestamp(key)
    return str(key)


def _number_text(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _iso_timestamp(value: date | datetime | time) -> str:
    if isinstance(value, time):
        return value.isoformat()
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def canonicalize(value: Any, _ancestors: set[int] | None = None, _depth: int = 0) -> Any:
    """Return a JSON-ready copy of *value* with sorted object keys.

    Mappings and sequences already on the current recursion path are replaced
    with :data:`CIRCULAR_MARKER`. Containers nested more than
    :data:`MAX_DEPTH` levels deep raise :class:`ValueError`.
    """
    ancestors = _ancestors if _ancestors is not None else set()
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, (datetime, date, time)):
        return _iso_timestamp(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")

    marker = id(value)
    if marker in ancestors:
        return CIRCULAR_MARKER
    if _depth >= MAX_DEPTH:
        raise ValueError(f"Nesting deeper than {MAX_DEPTH} levels")
    ancestors.add(marker)
    try:
        if isinstance(value, dict):
            items = {_key_text(key): item for key, item in value.items()}
            ordered = sorted(items, key=locale_sort_key)
            return {key: canonicalize(items[key], ancestors, _depth + 1) for key in ordered}
        if isinstance(value, (list, tuple)):
            return [canonicalize(item, ancestors, _depth + 1) for item in value]
        if isinstance(value, (set, frozenset)):
            return [canonicalize(item, ancestors, _depth + 1) for item in sorted(value, key=repr)]
    finally:
        ancestors.discard(marker)
    return str(value)


def stable_stringify(value: Any) -> str:
    """Render *value* as sorted, 2-space indented JSON ending in a newline.

    Raises :class:`ValueError` for values nested deeper than :data:`MAX_DEPTH`.
    """
    return json.dumps(canonicalize(value), indent=2, ensure_ascii=False) + "\n"


def strip_json_comments(source: str) -> str:
    """Remove ``//`` and ``/* */`` comments that sit outside string literals."""
    out: list[str] = []
    i = 0
    length = len(source)
    quote: str | None = None
    escaped = False

    while i < length:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < length else ""

        if quote is not None:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            i += 1
            continue

        if ch in {'"', "'"}:
            quote = ch
            out.append(ch)
            i += 1
            continue

        if ch == "/" and nxt == "/":
            i += 2
            while i < length and source[i] != "\n":
                i += 1
            continue

        if ch == "/" and nxt == "*":
            end = source.find("*/", i + 2)
            i = length if end < 0 else end + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def strip_trailing_commas(source: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", source)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_json_lenient(source: str) -> Any:
    """Parse JSON that may contain comments and trailing commas."""
    cleaned = strip_trailing_commas(strip_json_comments(source))
    return json.loads(cleaned, parse_constant=_reject_constant)


__all__ = [
    "CIRCULAR_MARKER",
    "MAX_DEPTH",
    "canonicalize",
    "locale_sort_key",
    "parse_json_lenient",
    "stable_stringify",
    "strip_json_comments",
    "strip_trailing_commas",
]
