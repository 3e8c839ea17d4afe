from __future__ import annotations

from enum import Enum
from pathlib import PurePath


class FormatKind(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    YAML = "yaml"
    XML = "xml"
    SPREADSHEET = "spreadsheet"
    DOCUMENT = "document"
    PDF = "pdf"
    SLIDEDECK = "slidedeck"
    UNSUPPORTED = "unsupported"

    @property
    def is_binary(self) -> bool:
        return self in BINARY_KINDS

    @property
    def is_extractable(self) -> bool:
        return self not in {FormatKind.SLIDEDECK, FormatKind.UNSUPPORTED}


BINARY_KINDS = frozenset(
    {
        FormatKind.SPREADSHEET,
        FormatKind.DOCUMENT,
        FormatKind.PDF,
        FormatKind.SLIDEDECK,
    }
)

EXTENSION_MAP: dict[str, FormatKind] = {
    ".md": FormatKind.MARKDOWN,
    ".markdown": FormatKind.MARKDOWN,
    ".json": FormatKind.JSON,
    ".yaml": FormatKind.YAML,
    ".yml": FormatKind.YAML,
    ".xml": FormatKind.XML,
    ".xlsx": FormatKind.SPREADSHEET,
    ".xlsm": FormatKind.SPREADSHEET,
    ".xls": FormatKind.SPREADSHEET,
    ".docx": FormatKind.DOCUMENT,
    ".pdf": FormatKind.PDF,
    ".pptx": FormatKind.SLIDEDECK,
}


def file_extension(name: str) -> str:
    """Return the lower-cased final suffix of *name*, including the dot."""
    return PurePath(name).suffix.lower()


def detect_format(name: str) -> FormatKind:
    """Classify a file by extension; unknown or missing extensions are text."""
    return EXTENSION_MAP.get(file_extension(name), FormatKind.TEXT)


__all__ = ["BINARY_KINDS", "EXTENSION_MAP", "FormatKind", "detect_format", "file_extension"]
