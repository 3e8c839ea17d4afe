from __future__ import annotations

import re

import fitz

from ..detection import FormatKind
from .base import ContainerAdapter

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


class PDFAdapter(ContainerAdapter):
    kind = FormatKind.PDF
    label = "PDF"

    def extract(self, data: bytes) -> str:
        parts: list[str] = []
        with fitz.open(stream=data, filetype="pdf") as pdf:
            for number, page in enumerate(pdf, start=1):
                parts.append(f"--- Page: {number} ---")
                parts.append(collapse_whitespace(page.get_text("text")))
                parts.append("")
        return "\n".join(parts)


__all__ = ["PDFAdapter", "collapse_whitespace"]
