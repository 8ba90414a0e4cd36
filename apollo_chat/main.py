"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import FileResponse

from apollo_chat import __version__
from apollo_chat.config import Settings, get_settings
from apollo_chat.logging import configure_logging
from apollo_chat.models import AVAILABLE_MODELS, ModelsResponse
from apollo_chat.websocket_handlers import websocket_endpoint

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.chat_timeout) as client:
        app.state.http_client = client
        yield
        del app.state.http_client


def create_app() -> FastAPI:
    """Application factory."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Apollo Chat",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
        return {"version": __version__, "environment": settings.environment}

    @app.get("/api/models", response_model=ModelsResponse)
    async def models(settings: Settings = Depends(get_settings)) -> ModelsResponse:
        return ModelsResponse(
            models=list(AVAILABLE_MODELS),
            default_model=settings.default_model,
            system_prompt=settings.system_prompt,
            max_tokens=settings.max_tokens,
        )

    app.add_api_websocket_route("/ws", websocket_endpoint)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""

    settings = get_settings()
    uvicorn.run("apollo_chat.main:app", host="127.0.0.1", port=settings.port)


app = create_app()
