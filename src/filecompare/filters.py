from __future__ import annotations

from .models import ComparisonConfig


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def normalize_text(text: str, config: ComparisonConfig) -> str:
    """Apply the comparison options to canonical text before diffing.

    Line endings are unified first and blank lines dropped next, so a line
    holding only whitespace is judged before any case folding. An empty text
    stays empty and therefore has no lines.
    """
    normalized = normalize_newlines(text)
    if config.ignore_empty_lines:
        normalized = "\n".join(line for line in normalized.split("\n") if line.strip())
    if normalized and not normalized.endswith("\n"):
        normalized += "\n"
    if not config.case_sensitive:
        normalized = normalized.lower()
    return normalized


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and drop the empty segment after a final newline."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


__all__ = ["normalize_newlines", "normalize_text", "split_lines"]
