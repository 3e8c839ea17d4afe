"""Background process that runs comparisons off the caller's thread.

Messages are plain dicts so they pickle cheaply across the process boundary:

* request: ``{"id", "type": "compare", "payload": {"textA", "textB", "config"}}``
* response: ``{"id", "ok": True, "payload": {"lines", "stats"}}`` or
  ``{"id", "ok": False, "error": str}``
"""

from __future__ import annotations

import logging
import multiprocessing
import queue
import threading
from functools import partial
from typing import Any, Callable, Mapping, Protocol

from .diffing import compute_diff_lines
from .exceptions import WorkerFaultError
from .models import ComparisonConfig

logger = logging.getLogger(__name__)

Message = dict[str, Any]
MessageHandler = Callable[[Message], None]
ErrorHandler = Callable[[BaseException], None]


class CompareWorker(Protocol):
    def post_message(self, message: Message) -> None:  # pragma: no cover - interface
        ...

    def terminate(self) -> None:  # pragma: no cover - interface
        ...


WorkerFactory = Callable[[MessageHandler, ErrorHandler], CompareWorker]


def handle_request(message: Any) -> Message | None:
    """Answer one request; messages that are not compare requests get no reply."""
    if not isinstance(message, Mapping) or message.get("type") != "compare":
        return None
    try:
        payload = message["payload"]
        config = ComparisonConfig.from_payload(payload["config"])
        outcome = compute_diff_lines(payload["textA"], payload["textB"], config)
    except Exception as exc:
        return {"id": message.get("id"), "ok": False, "error": str(exc) or "worker_error"}
    return {"id": message["id"], "ok": True, "payload": outcome.to_payload()}


def worker_main(requests: Any, responses: Any) -> None:
    while True:
        message = requests.get()
        if message is None:
            break
        response = handle_request(message)
        if response is not None:
            responses.put(response)


class ProcessCompareWorker:
    """One child process fed through a request queue.

    A daemon listener thread drains the response queue and hands each message
    to ``on_message``. If the child dies while the worker is open, the
    listener reports a :class:`WorkerFaultError` through ``on_error`` once and
    stops.
    """

    def __init__(
        self,
        on_message: MessageHandler,
        on_error: ErrorHandler,
        *,
        start_method: str = "spawn",
        poll_interval_s: float = 0.2,
    ) -> None:
        self._on_message = on_message
        self._on_error = on_error
        self._poll_interval_s = poll_interval_s
        context = multiprocessing.get_context(start_method)
        self._requests = context.Queue()
        self._responses = context.Queue()
        self._closing = threading.Event()
        self._process = context.Process(
            target=worker_main,
            args=(self._requests, self._responses),
            name="filecompare-worker",
            daemon=True,
        )
        self._process.start()
        self._listener = threading.Thread(target=self._listen, name="filecompare-worker-listener", daemon=True)
        self._listener.start()
        logger.debug("Started compare worker pid=%s", self._process.pid)

    @property
    def pid(self) -> int | None:
        return self._process.pid

    def is_alive(self) -> bool:
        return self._process.is_alive()

    def post_message(self, message: Message) -> None:
        if self._closing.is_set():
            raise WorkerFaultError("Compare worker is closed")
        self._requests.put(message)

    def _listen(self) -> None:
        while not self._closing.is_set():
            try:
                message = self._responses.get(timeout=self._poll_interval_s)
            except queue.Empty:
                if not self._process.is_alive():
                    self._fail(f"Compare worker exited with code {self._process.exitcode}")
                    return
                continue
            except (EOFError, OSError) as exc:
                self._fail(f"Compare worker channel broke: {exc}")
                return
            self._on_message(message)

    def _fail(self, reason: str) -> None:
        if self._closing.is_set():
            return
        self._closing.set()
        logger.error(reason)
        self._on_error(WorkerFaultError(reason))

    def terminate(self, timeout: float = 2.0) -> None:
        self._closing.set()
        if self._process.is_alive():
            try:
                self._requests.put(None)
            except (ValueError, OSError) as exc:
                logger.debug("Could not send stop sentinel: %s", exc)
            self._process.join(timeout)
            if self._process.is_alive():
                self._process.terminate()
                self._process.join(timeout)
        if threading.current_thread() is not self._listener:
            self._listener.join(timeout)


def process_worker_factory(start_method: str = "spawn", poll_interval_s: float = 0.2) -> WorkerFactory:
    return partial(ProcessCompareWorker, start_method=start_method, poll_interval_s=poll_interval_s)


__all__ = [
    "CompareWorker",
    "ErrorHandler",
    "MessageHandler",
    "ProcessCompareWorker",
    "WorkerFactory",
    "handle_request",
    "process_worker_factory",
    "worker_main",
]
