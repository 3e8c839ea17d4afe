from __future__ import annotations

from pydantic import BaseModel

from .models import ComparisonResult


class HealthStatus(BaseModel):
    status: str
    version: str
    worker: str


class FileInfoModel(BaseModel):
    name: str
    size: int


class ComparisonConfigModel(BaseModel):
    ignoreWhitespace: bool
    ignoreEmptyLines: bool
    caseSensitive: bool
    granularity: str


class DiffLineModel(BaseModel):
    index: int
    left: str | None
    right: str | None
    type: str


class ComparisonStatsModel(BaseModel):
    added: int
    deleted: int
    unchanged: int
    totalA: int
    totalB: int
    similarity: float


class ComparisonResultModel(BaseModel):
    id: str
    createdAt: int
    fileA: FileInfoModel
    fileB: FileInfoModel
    config: ComparisonConfigModel
    lines: list[DiffLineModel]
    stats: ComparisonStatsModel

    @classmethod
    def from_result(cls, result: ComparisonResult) -> "ComparisonResultModel":
        return cls.model_validate(result.to_payload())


__all__ = [
    "ComparisonConfigModel",
    "ComparisonResultModel",
    "ComparisonStatsModel",
    "DiffLineModel",
    "FileInfoModel",
    "HealthStatus",
]
