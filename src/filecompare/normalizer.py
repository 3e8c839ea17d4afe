"""Reduce any supported input file to canonical line-oriented text."""

from __future__ import annotations

from pathlib import Path

from .adapters import get_adapter
from .detection import FormatKind, detect_format
from .models import ParsedInput
from .utils import run_sync


async def parse_file(name: str, data: bytes, kind: FormatKind | None = None) -> ParsedInput:
    """Classify *name* and convert *data* into a :class:`ParsedInput`.

    Malformed JSON, YAML or XML never raises; the input comes back as raw
    text of kind ``text``. Corrupted spreadsheets, documents and PDFs raise
    :class:`~filecompare.exceptions.ContainerDecodeError`. Container decoding
    runs in a worker thread so the event loop stays responsive.
    """
    resolved = kind or detect_format(name)
    adapter = get_adapter(resolved)
    if resolved.is_binary and resolved.is_extractable:
        return await run_sync(adapter.convert, name, data)
    return adapter.convert(name, data)


async def parse_path(path: Path) -> ParsedInput:
    data = await run_sync(path.read_bytes)
    return await parse_file(path.name, data)


__all__ = ["parse_file", "parse_path"]
