"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger import jsonlogger

from assistant_bridge import __version__
from assistant_bridge.api.dependencies import SettingsDep
from assistant_bridge.api.routes import chat_stream, files
from assistant_bridge.config import get_settings
from assistant_bridge.upstream import close_http_client

settings = get_settings()
logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure JSON logging for production."""
    log_handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [log_handler]
    root_logger.setLevel(settings.log_level.upper())

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan; releases the shared upstream HTTP client."""
    setup_logging()
    logger.info("Starting assistant-bridge service")
    if settings.missing_config_message():
        logger.warning(settings.missing_config_message())

    yield

    logger.info("Shutting down assistant-bridge service")
    await close_http_client()


app = FastAPI(
    title="Assistant Bridge",
    description="Normalizes streamed assistant responses and resolves citation downloads",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_stream.router)
app.include_router(files.router)


@app.get("/")
async def root() -> dict:
    """Root endpoint with service info."""
    return {
        "service": "assistant-bridge",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/live")
async def liveness() -> dict:
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@app.get("/ready")
async def readiness(settings: SettingsDep) -> dict:
    """Kubernetes readiness probe; ready once the assistant is configured."""
    missing = settings.missing_config_message()
    if missing:
        return {"status": "not_ready", "reason": missing}
    return {"status": "ready"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "assistant_bridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
