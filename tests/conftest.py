"""Shared fixtures: office documents built on the fly and a scriptable worker."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any

import docx
import fitz
import openpyxl
import pytest

from filecompare.config import AppConfig, HistoryConfig, RuntimeConfig, WorkerConfig
from filecompare.worker import handle_request


class FakeWorker:
    """In-memory stand-in for the worker process; replies only when told to."""

    def __init__(self, on_message, on_error) -> None:
        self.on_message = on_message
        self.on_error = on_error
        self.posted: list[dict[str, Any]] = []
        self.terminated = False

    def post_message(self, message: dict[str, Any]) -> None:
        self.posted.append(message)

    def terminate(self) -> None:
        self.terminated = True

    def reply(self, message: dict[str, Any]) -> None:
        self.on_message(handle_request(message))


class FakeWorkerFactory:
    def __init__(self) -> None:
        self.workers: list[FakeWorker] = []

    def __call__(self, on_message, on_error) -> FakeWorker:
        worker = FakeWorker(on_message, on_error)
        self.workers.append(worker)
        return worker


@pytest.fixture
def fake_factory() -> FakeWorkerFactory:
    return FakeWorkerFactory()


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    runtime = RuntimeConfig(output_dir=tmp_path / "runs", enable_local_api=True, worker=WorkerConfig(enabled=False))
    history = HistoryConfig(path=tmp_path / "runs" / "history.json", limit=50)
    return AppConfig(runtime=runtime, history=history)


@pytest.fixture
def xlsx_bytes() -> bytes:
    workbook = openpyxl.Workbook()
    data = workbook.active
    data.title = "Data"
    data.append(["name", "qty"])
    data.append(["apple", 3])
    data.append(["pear", None])
    notes = workbook.create_sheet("Notes")
    notes["A1"] = "hello"
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    document = docx.Document()
    document.add_paragraph("Hello")
    document.add_paragraph("World")
    table = document.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "left cell"
    table.cell(0, 1).text = "right cell"
    document.add_paragraph("After table")
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def pdf_bytes() -> bytes:
    pdf = fitz.open()
    first = pdf.new_page()
    first.insert_text((72, 72), "Line one\nLine two")
    second = pdf.new_page()
    second.insert_text((72, 72), "Second page")
    data = pdf.tobytes()
    pdf.close()
    return data
