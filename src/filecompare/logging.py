from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class StageTimings:
    read_ms: float
    parse_ms: float
    compare_ms: float


@dataclass(slots=True)
class RunLogEntry:
    run_id: str
    status: str
    file_a: str
    file_b: str
    kind_a: str
    kind_b: str
    size_a: int
    size_b: int
    execution: str
    error_code: str | None
    timings: StageTimings
    similarity: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class RunLogger:
    """Append one JSON line per comparison run."""

    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    @property
    def path(self) -> Path:
        return self._log_file

    def append(self, entry: RunLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


def configure_logging(log_level: int | str = logging.WARNING) -> logging.Logger:
    """Route package diagnostics to stderr at *log_level*."""
    resolved = log_level if isinstance(log_level, int) else getattr(logging, str(log_level).upper(), logging.WARNING)
    logger = logging.getLogger("filecompare")
    logger.setLevel(resolved)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["RunLogEntry", "RunLogger", "StageTimings", "configure_logging"]
