from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from . import __version__
from .config import AppConfig
from .core import ComparisonService
from .exceptions import ComparisonError, CompareExecutionError, ContainerDecodeError, WorkerFaultError
from .history import HistoryStore
from .models import ComparisonConfig
from .schemas import ComparisonResultModel, HealthStatus
from .settings import get_settings, prepare_config
from .utils import size_within_limit


def create_app(
    config_path: Path | None = None,
    *,
    require_enabled: bool = True,
    config: AppConfig | None = None,
    service: ComparisonService | None = None,
) -> FastAPI:
    config = config or prepare_config(get_settings(), config_path)
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")
    service = service or ComparisonService(config)
    history = HistoryStore(config.history.path, config.history.limit)
    app = FastAPI(title="File Compare", version=__version__)
    app.state.config = config
    app.state.service = service
    app.state.history = history

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        service.dispatcher.close()

    @app.get("/health", response_model=HealthStatus)
    async def health() -> HealthStatus:
        return HealthStatus(status="ok", version=__version__, worker=service.dispatcher.state.value)

    @app.post("/compare", response_model=ComparisonResultModel)
    async def compare(
        file_a: UploadFile = File(...),
        file_b: UploadFile = File(...),
        ignore_whitespace: bool = Form(config.compare.ignore_whitespace),
        ignore_empty_lines: bool = Form(config.compare.ignore_empty_lines),
        case_sensitive: bool = Form(config.compare.case_sensitive),
        save: bool = Form(True),
    ) -> ComparisonResultModel:
        data_a = await file_a.read()
        data_b = await file_b.read()
        for payload in (data_a, data_b):
            if not size_within_limit(len(payload), config.runtime.max_file_size_mb):
                raise HTTPException(status_code=413, detail="SIZE_LIMIT")
        options = ComparisonConfig(
            ignore_whitespace=ignore_whitespace,
            ignore_empty_lines=ignore_empty_lines,
            case_sensitive=case_sensitive,
        )
        try:
            result = await service.compare_bytes(
                file_a.filename or "a.txt",
                data_a,
                file_b.filename or "b.txt",
                data_b,
                options,
            )
        except (ComparisonError, ContainerDecodeError) as exc:
            raise HTTPException(status_code=400, detail=exc.code) from exc
        except (CompareExecutionError, WorkerFaultError) as exc:
            raise HTTPException(status_code=503, detail=exc.code) from exc
        if save:
            history.save(result)
        return ComparisonResultModel.from_result(result)

    @app.get("/history", response_model=list[ComparisonResultModel])
    async def list_history(limit: int = 50) -> list[ComparisonResultModel]:
        records = history.load()
        if limit > 0:
            records = records[:limit]
        return [ComparisonResultModel.from_result(record) for record in records]

    @app.delete("/history")
    async def clear_history() -> dict[str, str]:
        history.clear()
        return {"status": "cleared"}

    return app


__all__ = ["create_app"]
