"""JSON file store for completed comparisons, newest first."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from .models import ComparisonResult
from .utils import atomic_write

DEFAULT_LIMIT = 50


def _is_record(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("id"), str)
        and isinstance(item.get("createdAt"), int)
        and not isinstance(item.get("createdAt"), bool)
    )


class HistoryStore:
    def __init__(self, path: Path, limit: int = DEFAULT_LIMIT) -> None:
        self._path = path
        self._limit = max(1, limit)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load_payloads(self) -> list[dict[str, Any]]:
        """Return stored records as raw dicts; unreadable files count as empty."""
        if not self._path.exists():
            return []
        try:
            parsed = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if _is_record(item)]

    def load(self) -> list[ComparisonResult]:
        results: list[ComparisonResult] = []
        for item in self.load_payloads():
            try:
                results.append(ComparisonResult.from_payload(item))
            except (KeyError, TypeError, ValueError):
                continue
        return results

    def save(self, result: ComparisonResult) -> None:
        with self._lock:
            history = [item for item in self.load_payloads() if item["id"] != result.id]
            records = [result.to_payload(), *history][: self._limit]
            atomic_write(self._path, json.dumps(records, ensure_ascii=False))

    def clear(self) -> None:
        with self._lock:
            self._path.unlink(missing_ok=True)


__all__ = ["DEFAULT_LIMIT", "HistoryStore"]
