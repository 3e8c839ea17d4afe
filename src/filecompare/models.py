"""Domain models for the comparison engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .detection import FormatKind


class Granularity(str, Enum):
    LINE = "line"


def resolve_granularity(value: object) -> Granularity:
    try:
        return Granularity(value)
    except ValueError as exc:
        raise ValueError(f"Unsupported granularity: {value!r}") from exc


class DiffLineType(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


class ComparisonStatus(str, Enum):
    IDLE = "idle"
    READING = "reading"
    PARSING = "parsing"
    COMPARING = "comparing"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ParsedInput:
    """Canonical text extracted from one input file."""

    kind: FormatKind
    name: str
    size: int
    text: str


@dataclass(frozen=True, slots=True)
class ComparisonConfig:
    """Options applied to a single comparison run."""

    ignore_whitespace: bool = True
    ignore_empty_lines: bool = False
    case_sensitive: bool = True
    granularity: Granularity = Granularity.LINE

    def to_payload(self) -> dict[str, Any]:
        return {
            "ignoreWhitespace": self.ignore_whitespace,
            "ignoreEmptyLines": self.ignore_empty_lines,
            "caseSensitive": self.case_sensitive,
            "granularity": getattr(self.granularity, "value", self.granularity),
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ComparisonConfig":
        resolved = resolve_granularity(data.get("granularity", Granularity.LINE.value))
        return cls(
            ignore_whitespace=bool(data.get("ignoreWhitespace", True)),
            ignore_empty_lines=bool(data.get("ignoreEmptyLines", False)),
            case_sensitive=bool(data.get("caseSensitive", True)),
            granularity=resolved,
        )


@dataclass(frozen=True, slots=True)
class DiffLine:
    index: int
    left: str | None
    right: str | None
    type: DiffLineType

    def to_payload(self) -> dict[str, Any]:
        return {"index": self.index, "left": self.left, "right": self.right, "type": self.type.value}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "DiffLine":
        return cls(
            index=int(data["index"]),
            left=data.get("left"),
            right=data.get("right"),
            type=DiffLineType(data["type"]),
        )


@dataclass(frozen=True, slots=True)
class ComparisonStats:
    added: int
    deleted: int
    unchanged: int
    total_a: int
    total_b: int
    similarity: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "added": self.added,
            "deleted": self.deleted,
            "unchanged": self.unchanged,
            "totalA": self.total_a,
            "totalB": self.total_b,
            "similarity": self.similarity,
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ComparisonStats":
        return cls(
            added=int(data["added"]),
            deleted=int(data["deleted"]),
            unchanged=int(data["unchanged"]),
            total_a=int(data["totalA"]),
            total_b=int(data["totalB"]),
            similarity=float(data["similarity"]),
        )


@dataclass(frozen=True, slots=True)
class CompareOutcome:
    """The ``{lines, stats}`` pair produced by one comparison."""

    lines: tuple[DiffLine, ...]
    stats: ComparisonStats

    def to_payload(self) -> dict[str, Any]:
        return {
            "lines": [line.to_payload() for line in self.lines],
            "stats": self.stats.to_payload(),
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CompareOutcome":
        return cls(
            lines=tuple(DiffLine.from_payload(item) for item in data["lines"]),
            stats=ComparisonStats.from_payload(data["stats"]),
        )


@dataclass(frozen=True, slots=True)
class FileInfo:
    name: str
    size: int

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "size": self.size}

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "FileInfo":
        return cls(name=str(data["name"]), size=int(data["size"]))


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """A completed comparison, in the shape handed to the history store."""

    id: str
    created_at: int
    file_a: FileInfo
    file_b: FileInfo
    config: ComparisonConfig
    lines: tuple[DiffLine, ...]
    stats: ComparisonStats
    kinds: tuple[FormatKind, FormatKind] = field(default=(FormatKind.TEXT, FormatKind.TEXT), compare=False)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "fileA": self.file_a.to_payload(),
            "fileB": self.file_b.to_payload(),
            "config": self.config.to_payload(),
            "lines": [line.to_payload() for line in self.lines],
            "stats": self.stats.to_payload(),
        }

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ComparisonResult":
        return cls(
            id=str(data["id"]),
            created_at=int(data["createdAt"]),
            file_a=FileInfo.from_payload(data["fileA"]),
            file_b=FileInfo.from_payload(data["fileB"]),
            config=ComparisonConfig.from_payload(data["config"]),
            lines=tuple(DiffLine.from_payload(item) for item in data["lines"]),
            stats=ComparisonStats.from_payload(data["stats"]),
        )


__all__ = [
    "CompareOutcome",
    "ComparisonConfig",
    "ComparisonResult",
    "ComparisonStats",
    "ComparisonStatus",
    "DiffLine",
    "DiffLineType",
    "FileInfo",
    "Granularity",
    "ParsedInput",
    "resolve_granularity",
]
