from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .config import AppConfig
from .dispatcher import CompareDispatcher, WorkerState
from .exceptions import ComparisonError, FileCompareError
from .logging import RunLogEntry, RunLogger, StageTimings
from .models import (
    ComparisonConfig,
    ComparisonResult,
    ComparisonStatus,
    FileInfo,
    ParsedInput,
)
from .normalizer import parse_file
from .utils import epoch_ms, generate_run_id, run_sync, size_within_limit
from .worker import process_worker_factory

ProgressCallback = Callable[[ComparisonStatus], None]


@dataclass(slots=True)
class _Source:
    name: str
    data: bytes


@dataclass(slots=True)
class _CompareContext:
    run_id: str
    config: ComparisonConfig
    callback: ProgressCallback
    read_ms: float = 0.0
    parse_ms: float = 0.0
    compare_ms: float = 0.0
    parsed: tuple[ParsedInput, ParsedInput] | None = None


class ComparisonService:
    """Parse two inputs, compare them and log the run.

    The service hands back a :class:`ComparisonResult` and never stores it;
    persisting results is left to the caller.
    """

    def __init__(self, config: AppConfig, dispatcher: CompareDispatcher | None = None) -> None:
        self._config = config
        if dispatcher is None:
            worker = config.runtime.worker
            dispatcher = CompareDispatcher(
                process_worker_factory(worker.start_method, worker.poll_interval_s),
                use_worker=worker.enabled,
            )
        self._dispatcher = dispatcher
        self._logger = RunLogger(config.run_log_path)

    @property
    def dispatcher(self) -> CompareDispatcher:
        return self._dispatcher

    def default_config(self) -> ComparisonConfig:
        return self._config.compare.to_comparison_config()

    async def compare_files(
        self,
        path_a: Path,
        path_b: Path,
        config: ComparisonConfig | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> ComparisonResult:
        context = self._build_context(config, progress)
        context.callback(ComparisonStatus.READING)
        read_start = time.perf_counter()
        try:
            sources = [await self._read_source(path) for path in (path_a, path_b)]
        except FileCompareError as exc:
            self._log_failure(context, path_a.name, path_b.name, exc)
            context.callback(ComparisonStatus.ERROR)
            raise
        context.read_ms = (time.perf_counter() - read_start) * 1000
        return await self._run(context, sources[0], sources[1])

    async def compare_bytes(
        self,
        name_a: str,
        data_a: bytes,
        name_b: str,
        data_b: bytes,
        config: ComparisonConfig | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> ComparisonResult:
        context = self._build_context(config, progress)
        context.callback(ComparisonStatus.READING)
        try:
            for name, data in ((name_a, data_a), (name_b, data_b)):
                self._enforce_size_limit(name, len(data))
        except FileCompareError as exc:
            self._log_failure(context, name_a, name_b, exc)
            context.callback(ComparisonStatus.ERROR)
            raise
        return await self._run(context, _Source(name_a, data_a), _Source(name_b, data_b))

    def _build_context(self, config: ComparisonConfig | None, progress: ProgressCallback | None) -> _CompareContext:
        return _CompareContext(
            run_id=generate_run_id("cmp"),
            config=config or self.default_config(),
            callback=progress or (lambda _: None),
        )

    async def _read_source(self, path: Path) -> _Source:
        if not path.is_file():
            raise ComparisonError("NOT_FOUND", f"Source file does not exist: {path}")
        self._enforce_size_limit(path.name, path.stat().st_size)
        data = await run_sync(path.read_bytes)
        return _Source(path.name, data)

    def _enforce_size_limit(self, name: str, size_bytes: int) -> None:
        if not size_within_limit(size_bytes, self._config.runtime.max_file_size_mb):
            raise ComparisonError("SIZE_LIMIT", f"File exceeds configured limit: {name}")

    async def _run(self, context: _CompareContext, source_a: _Source, source_b: _Source) -> ComparisonResult:
        try:
            context.callback(ComparisonStatus.PARSING)
            parse_start = time.perf_counter()
            parsed = await asyncio.gather(
                parse_file(source_a.name, source_a.data),
                parse_file(source_b.name, source_b.data),
            )
            context.parsed = (parsed[0], parsed[1])
            context.parse_ms = (time.perf_counter() - parse_start) * 1000

            context.callback(ComparisonStatus.COMPARING)
            compare_start = time.perf_counter()
            outcome = await self._dispatcher.compare(parsed[0].text, parsed[1].text, context.config)
            context.compare_ms = (time.perf_counter() - compare_start) * 1000
        except FileCompareError as exc:
            self._log_failure(context, source_a.name, source_b.name, exc)
            context.callback(ComparisonStatus.ERROR)
            raise

        result = ComparisonResult(
            id=context.run_id,
            created_at=epoch_ms(),
            file_a=FileInfo(parsed[0].name, parsed[0].size),
            file_b=FileInfo(parsed[1].name, parsed[1].size),
            config=context.config,
            lines=outcome.lines,
            stats=outcome.stats,
            kinds=(parsed[0].kind, parsed[1].kind),
        )
        self._append_success_log(context, result)
        context.callback(ComparisonStatus.DONE)
        return result

    def _execution_path(self) -> str:
        return "worker" if self._dispatcher.state is WorkerState.ACTIVE else "in-process"

    def _append_success_log(self, context: _CompareContext, result: ComparisonResult) -> None:
        self._logger.append(
            RunLogEntry(
                run_id=context.run_id,
                status="success",
                file_a=result.file_a.name,
                file_b=result.file_b.name,
                kind_a=result.kinds[0].value,
                kind_b=result.kinds[1].value,
                size_a=result.file_a.size,
                size_b=result.file_b.size,
                execution=self._execution_path(),
                error_code=None,
                timings=StageTimings(context.read_ms, context.parse_ms, context.compare_ms),
                similarity=result.stats.similarity,
            )
        )

    def _log_failure(self, context: _CompareContext, name_a: str, name_b: str, exc: FileCompareError) -> None:
        kinds = ("unknown", "unknown")
        sizes = (0, 0)
        if context.parsed is not None:
            kinds = (context.parsed[0].kind.value, context.parsed[1].kind.value)
            sizes = (context.parsed[0].size, context.parsed[1].size)
        self._logger.append(
            RunLogEntry(
                run_id=context.run_id,
                status="failure",
                file_a=name_a,
                file_b=name_b,
                kind_a=kinds[0],
                kind_b=kinds[1],
                size_a=sizes[0],
                size_b=sizes[1],
                execution=self._execution_path(),
                error_code=exc.code,
                timings=StageTimings(context.read_ms, context.parse_ms, context.compare_ms),
            )
        )


__all__ = ["ComparisonService", "ProgressCallback"]
