"""ASGI entry point: ``uvicorn main:app``.

When the local API is switched off in ``config.toml`` the module still
exports an app, one that reports the disabled state and refuses work.
"""

from fastapi import FastAPI, HTTPException

from filecompare import __version__
from filecompare.api import create_app
from filecompare.logging import configure_logging
from filecompare.schemas import HealthStatus
from filecompare.settings import get_settings, prepare_config

DISABLED_DETAIL = "Local API disabled. Set runtime.enable_local_api = true in config.toml or FILECOMPARE_ENABLE_LOCAL_API=1"


def build_app() -> FastAPI:
    config = prepare_config(get_settings())
    configure_logging(config.runtime.log_level)
    if config.runtime.enable_local_api:
        return create_app(config=config)

    disabled = FastAPI(title="File Compare (disabled)", version=__version__)

    @disabled.get("/health", response_model=HealthStatus)
    async def health() -> HealthStatus:
        return HealthStatus(status="disabled", version=__version__, worker="disabled")

    @disabled.api_route("/{path:path}", methods=["GET", "POST", "DELETE"])
    async def refuse(path: str) -> None:
        raise HTTPException(status_code=503, detail=DISABLED_DETAIL)

    return disabled


app = build_app()
