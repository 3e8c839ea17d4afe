"""Route comparisons to the background worker, or run them in-process.

The dispatcher owns the only shared mutable state in the engine: the worker
handle and the table of pending requests keyed by correlation id. The worker
path moves through ``uninitialized -> active -> disabled`` and never goes
back, so a failed or crashed worker is not recreated.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from concurrent.futures import Future
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping

from .diffing import compute_diff_lines
from .exceptions import CompareExecutionError, WorkerFaultError, WorkerUnavailableError
from .models import CompareOutcome, ComparisonConfig
from .utils import epoch_ms
from .worker import CompareWorker, Message, ProcessCompareWorker, WorkerFactory

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISABLED = "disabled"


class CompareDispatcher:
    def __init__(self, worker_factory: WorkerFactory | None = None, *, use_worker: bool = True) -> None:
        self._worker_factory: WorkerFactory = worker_factory or ProcessCompareWorker
        self._state = WorkerState.UNINITIALIZED if use_worker else WorkerState.DISABLED
        self._worker: CompareWorker | None = None
        self._pending: dict[str, Future[Message]] = {}
        self._lock = threading.Lock()
        self._counter = itertools.count(1)

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def next_request_id(self) -> str:
        return f"{epoch_ms()}-{next(self._counter)}"

    async def compare(self, text_a: str, text_b: str, config: ComparisonConfig) -> CompareOutcome:
        """Diff two canonical texts; the result is identical on either path.

        Raises :class:`CompareExecutionError` when the pipeline fails and
        :class:`WorkerFaultError` when the worker dies before answering.
        """
        try:
            worker = self._ensure_worker()
        except WorkerUnavailableError as exc:
            logger.warning("%s; comparing in-process from now on", exc)
            worker = None

        future = self._submit(worker, text_a, text_b, config) if worker is not None else None
        if future is None:
            return self.compare_in_process(text_a, text_b, config)

        response = await asyncio.wrap_future(future)
        if not response.get("ok"):
            raise CompareExecutionError(str(response.get("error") or "worker_error"))
        return CompareOutcome.from_payload(response["payload"])

    def compare_in_process(self, text_a: str, text_b: str, config: ComparisonConfig) -> CompareOutcome:
        try:
            return compute_diff_lines(text_a, text_b, config)
        except Exception as exc:
            raise CompareExecutionError(str(exc) or exc.__class__.__name__) from exc

    def _ensure_worker(self) -> CompareWorker | None:
        with self._lock:
            if self._state is WorkerState.ACTIVE:
                return self._worker
            if self._state is WorkerState.DISABLED:
                return None
            try:
                self._worker = self._worker_factory(self._handle_message, self._handle_error)
            except Exception as exc:
                self._state = WorkerState.DISABLED
                raise WorkerUnavailableError(f"Could not start compare worker: {exc}") from exc
            self._state = WorkerState.ACTIVE
            return self._worker

    def _submit(
        self, worker: CompareWorker, text_a: str, text_b: str, config: ComparisonConfig
    ) -> Future[Message] | None:
        request_id = self.next_request_id()
        future: Future[Message] = Future()
        with self._lock:
            if self._state is not WorkerState.ACTIVE or self._worker is not worker:
                return None
            self._pending[request_id] = future
        request: Message = {
            "id": request_id,
            "type": "compare",
            "payload": {"textA": text_a, "textB": text_b, "config": config.to_payload()},
        }
        try:
            worker.post_message(request)
        except Exception as exc:
            with self._lock:
                self._pending.pop(request_id, None)
            self._handle_error(exc)
            raise WorkerFaultError(f"Could not reach compare worker: {exc}") from exc
        return future

    def _handle_message(self, message: Any) -> None:
        request_id = message.get("id") if isinstance(message, Mapping) else None
        with self._lock:
            future = self._pending.pop(request_id, None) if isinstance(request_id, str) else None
        if future is None:
            logger.debug("Dropping response for unknown request %r", request_id)
            return
        if not future.done():
            future.set_result(dict(message))

    def _handle_error(self, error: BaseException) -> None:
        fault = error if isinstance(error, WorkerFaultError) else WorkerFaultError(str(error) or "worker_error")
        worker, pending = self._disable()
        if worker is not None:
            logger.error("Compare worker failed, falling back to in-process comparison: %s", fault)
        for future in pending:
            if not future.done():
                future.set_exception(fault)
        if worker is not None:
            worker.terminate()

    def _disable(self) -> tuple[CompareWorker | None, list[Future[Message]]]:
        with self._lock:
            self._state = WorkerState.DISABLED
            worker, self._worker = self._worker, None
            pending = list(self._pending.values())
            self._pending.clear()
        return worker, pending

    def close(self) -> None:
        """Stop the worker owned by this dispatcher; later calls run in-process."""
        worker, pending = self._disable()
        for future in pending:
            if not future.done():
                future.set_exception(WorkerFaultError("Compare dispatcher closed"))
        if worker is not None:
            worker.terminate()


@lru_cache(maxsize=1)
def get_dispatcher() -> CompareDispatcher:
    """Return the process-wide dispatcher; it lives as long as the process."""

    return CompareDispatcher()


async def compare(text_a: str, text_b: str, config: ComparisonConfig | None = None) -> CompareOutcome:
    return await get_dispatcher().compare(text_a, text_b, config or ComparisonConfig())


__all__ = ["CompareDispatcher", "WorkerState", "compare", "get_dispatcher"]
