from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .models import ComparisonConfig

CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class WorkerConfig:
    enabled: bool = True
    start_method: str = "spawn"
    poll_interval_s: float = 0.2


@dataclass(slots=True)
class CompareDefaults:
    ignore_whitespace: bool = True
    ignore_empty_lines: bool = False
    case_sensitive: bool = True

    def to_comparison_config(self) -> ComparisonConfig:
        return ComparisonConfig(
            ignore_whitespace=self.ignore_whitespace,
            ignore_empty_lines=self.ignore_empty_lines,
            case_sensitive=self.case_sensitive,
        )


@dataclass(slots=True)
class HistoryConfig:
    path: Path = Path("runs/history.json")
    limit: int = 50


@dataclass(slots=True)
class RuntimeConfig:
    output_dir: Path = Path("runs")
    log_file: str = "log.jsonl"
    log_level: str = "WARNING"
    max_file_size_mb: int = 25
    enable_local_api: bool = False
    worker: WorkerConfig = field(default_factory=WorkerConfig)


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    compare: CompareDefaults = field(default_factory=CompareDefaults)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @property
    def run_log_path(self) -> Path:
        return self.runtime.output_dir / self.runtime.log_file


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else None


def _build_worker(data: Mapping[str, object] | None) -> WorkerConfig:
    if not data:
        return WorkerConfig()
    return WorkerConfig(
        enabled=bool(data.get("enabled", True)),
        start_method=str(data.get("start_method", "spawn")),
        poll_interval_s=float(data.get("poll_interval_s", 0.2)),
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        output_dir=Path(str(data.get("output_dir", "runs"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        log_level=str(data.get("log_level", "WARNING")),
        max_file_size_mb=int(data.get("max_file_size_mb", 25)),
        enable_local_api=bool(data.get("enable_local_api", False)),
        worker=_build_worker(_section(data, "worker")),
    )


def _build_compare(data: Mapping[str, object] | None) -> CompareDefaults:
    if not data:
        return CompareDefaults()
    return CompareDefaults(
        ignore_whitespace=bool(data.get("ignore_whitespace", True)),
        ignore_empty_lines=bool(data.get("ignore_empty_lines", False)),
        case_sensitive=bool(data.get("case_sensitive", True)),
    )


def _build_history(data: Mapping[str, object] | None) -> HistoryConfig:
    if not data:
        return HistoryConfig()
    return HistoryConfig(
        path=Path(str(data.get("path", "runs/history.json"))),
        limit=max(1, int(data.get("limit", 50))),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    return AppConfig(
        runtime=_build_runtime(_section(raw, "runtime")),
        compare=_build_compare(_section(raw, "compare")),
        history=_build_history(_section(raw, "history")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "output_dir": str(config.runtime.output_dir),
            "log_file": config.runtime.log_file,
            "log_level": config.runtime.log_level,
            "max_file_size_mb": config.runtime.max_file_size_mb,
            "enable_local_api": config.runtime.enable_local_api,
            "worker": {
                "enabled": config.runtime.worker.enabled,
                "start_method": config.runtime.worker.start_method,
                "poll_interval_s": config.runtime.worker.poll_interval_s,
            },
        },
        "compare": {
            "ignore_whitespace": config.compare.ignore_whitespace,
            "ignore_empty_lines": config.compare.ignore_empty_lines,
            "case_sensitive": config.compare.case_sensitive,
        },
        "history": {
            "path": str(config.history.path),
            "limit": config.history.limit,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "APIConfig",
    "AppConfig",
    "CompareDefaults",
    "HistoryConfig",
    "RuntimeConfig",
    "WorkerConfig",
    "dump_config",
    "load_config",
]
