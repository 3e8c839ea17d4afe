from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path

import pytest

from filecompare.config import AppConfig
from filecompare.core import ComparisonService
from filecompare.detection import FormatKind
from filecompare.dispatcher import CompareDispatcher
from filecompare.exceptions import ComparisonError, ContainerDecodeError
from filecompare.models import ComparisonConfig, ComparisonStatus


def build_service(config: AppConfig) -> ComparisonService:
    return ComparisonService(config, dispatcher=CompareDispatcher(use_worker=False))


def read_log(config: AppConfig) -> list[dict]:
    return [json.loads(line) for line in config.run_log_path.read_text(encoding="utf-8").splitlines()]


def test_compare_files_ignores_json_key_order(tmp_path: Path, app_config: AppConfig) -> None:
    file_a = tmp_path / "a.json"
    file_a.write_text('{"name": "app", "tags": ["x"], "port": 80}', encoding="utf-8")
    file_b = tmp_path / "b.json"
    file_b.write_text('{\n  "port": 80,\n  // same data\n  "tags": ["x"],\n  "name": "app",\n}', encoding="utf-8")
    service = build_service(app_config)

    result = asyncio.run(service.compare_files(file_a, file_b))

    assert result.stats.similarity == 1
    assert result.stats.added == result.stats.deleted == 0
    assert result.kinds == (FormatKind.JSON, FormatKind.JSON)
    assert result.file_a.name == "a.json"
    assert result.file_b.size == file_b.stat().st_size
    assert result.id.startswith("cmp-")
    assert result.config == app_config.compare.to_comparison_config()

    entries = read_log(app_config)
    assert entries[-1]["status"] == "success"
    assert entries[-1]["run_id"] == result.id
    assert entries[-1]["execution"] == "in-process"
    assert entries[-1]["similarity"] == 1


def test_compare_files_reports_progress(tmp_path: Path, app_config: AppConfig) -> None:
    file_a = tmp_path / "a.txt"
    file_a.write_text("one\ntwo\n", encoding="utf-8")
    file_b = tmp_path / "b.txt"
    file_b.write_text("one\nthree\n", encoding="utf-8")
    seen: list[ComparisonStatus] = []

    result = asyncio.run(build_service(app_config).compare_files(file_a, file_b, progress=seen.append))

    assert seen == [
        ComparisonStatus.READING,
        ComparisonStatus.PARSING,
        ComparisonStatus.COMPARING,
        ComparisonStatus.DONE,
    ]
    assert result.stats.unchanged == 1


def test_missing_file_is_rejected(tmp_path: Path, app_config: AppConfig) -> None:
    present = tmp_path / "a.txt"
    present.write_text("a", encoding="utf-8")
    seen: list[ComparisonStatus] = []

    with pytest.raises(ComparisonError) as exc:
        asyncio.run(build_service(app_config).compare_files(present, tmp_path / "gone.txt", progress=seen.append))

    assert exc.value.code == "NOT_FOUND"
    assert seen[-1] is ComparisonStatus.ERROR
    assert read_log(app_config)[-1]["error_code"] == "NOT_FOUND"


def test_size_limit_is_enforced(tmp_path: Path, app_config: AppConfig) -> None:
    app_config.runtime.max_file_size_mb = 0
    source = tmp_path / "a.txt"
    source.write_text("too big", encoding="utf-8")

    with pytest.raises(ComparisonError) as exc:
        asyncio.run(build_service(app_config).compare_files(source, source))

    assert exc.value.code == "SIZE_LIMIT"


def test_corrupted_container_fails_the_run(app_config: AppConfig) -> None:
    seen: list[ComparisonStatus] = []
    service = build_service(app_config)

    with pytest.raises(ContainerDecodeError):
        asyncio.run(service.compare_bytes("scan.pdf", b"not a pdf", "notes.txt", b"hi", progress=seen.append))

    assert seen[-1] is ComparisonStatus.ERROR
    entry = read_log(app_config)[-1]
    assert entry["status"] == "failure"
    assert entry["error_code"] == "CONTAINER_DECODE"
    assert entry["file_a"] == "scan.pdf"


def test_compare_bytes_uses_given_options(app_config: AppConfig) -> None:
    options = ComparisonConfig(case_sensitive=False, ignore_empty_lines=True)
    result = asyncio.run(
        build_service(app_config).compare_bytes("a.md", b"# Title\n\nBody\n", "b.md", b"# TITLE\nbody\n", options)
    )
    assert result.config == options
    assert result.stats.similarity == 1
    assert result.kinds == (FormatKind.MARKDOWN, FormatKind.MARKDOWN)


def test_default_config_follows_app_config(app_config: AppConfig) -> None:
    app_config.compare = replace(app_config.compare, ignore_whitespace=False)
    service = build_service(app_config)
    assert service.default_config().ignore_whitespace is False
