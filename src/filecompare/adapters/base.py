from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from ..detection import FormatKind
from ..exceptions import ContainerDecodeError, FormatParseError
from ..models import ParsedInput

logger = logging.getLogger(__name__)


class Adapter(Protocol):
    def convert(self, name: str, data: bytes) -> ParsedInput:  # pragma: no cover - interface
        ...


def decode_text(data: bytes) -> str:
    """Decode UTF-8 bytes, dropping a BOM and replacing invalid sequences."""
    return data.decode("utf-8-sig", errors="replace")


class TextAdapter:
    """Plain text and markdown pass through unchanged."""

    def __init__(self, kind: FormatKind = FormatKind.TEXT) -> None:
        self.kind = kind

    def convert(self, name: str, data: bytes) -> ParsedInput:
        return ParsedInput(kind=self.kind, name=name, size=len(data), text=decode_text(data))


class EmptyAdapter:
    """Formats that are shown natively and never text-extracted."""

    def __init__(self, kind: FormatKind) -> None:
        self.kind = kind

    def convert(self, name: str, data: bytes) -> ParsedInput:
        return ParsedInput(kind=self.kind, name=name, size=len(data), text="")


class StructuredAdapter:
    """Base for JSON/YAML/XML.

    ``convert`` never raises: any failure while parsing or serializing in
    ``render``, including overly deep nesting, downgrades the input to raw
    text.
    """

    kind: FormatKind

    def render(self, raw: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def convert(self, name: str, data: bytes) -> ParsedInput:
        raw = decode_text(data)
        try:
            text = guarded(self.render, raw)
        except FormatParseError as exc:
            logger.debug("Falling back to plain text for %s: %s", name, exc)
            return ParsedInput(kind=FormatKind.TEXT, name=name, size=len(data), text=raw)
        return ParsedInput(kind=self.kind, name=name, size=len(data), text=text)


class ContainerAdapter:
    """Base for binary containers; decode failures become ContainerDecodeError."""

    kind: FormatKind
    label: str = "container"

    def extract(self, data: bytes) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def convert(self, name: str, data: bytes) -> ParsedInput:
        try:
            text = self.extract(data)
        except ContainerDecodeError:
            raise
        except Exception as exc:
            raise ContainerDecodeError(f"Could not decode {self.label} {name}: {exc}") from exc
        return ParsedInput(kind=self.kind, name=name, size=len(data), text=text)


def guarded(parse: Callable[[str], Any], raw: str) -> Any:
    """Run *parse* on *raw*, re-raising any failure as FormatParseError."""
    try:
        return parse(raw)
    except Exception as exc:
        raise FormatParseError(str(exc) or exc.__class__.__name__) from exc


__all__ = [
    "Adapter",
    "ContainerAdapter",
    "EmptyAdapter",
    "StructuredAdapter",
    "TextAdapter",
    "decode_text",
    "guarded",
]
