"""FastAPI web application for schemascope."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schemascope import __version__
from schemascope.config import AppConfig, load_app_config
from schemascope.web.routes import chat, databases

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    config: AppConfig = app.state.config
    logger.info(f"schemascope API starting up (schema folder: {config.sources.directory})")
    logger.debug(f"Config: {config.log_redacted()}")
    yield
    logger.info("schemascope API shutting down...")


def create_app(
    config: AppConfig | None = None,
    chat_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        config: Application config; loaded from file/environment when None
        chat_transport: Optional httpx transport for the chat provider
    """
    config = config or load_app_config()

    app = FastAPI(
        title="schemascope",
        description="Explore SQL schema files, relationships and RLS policies",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.chat_transport = chat_transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(databases.router, prefix="/api", tags=["databases"])
    app.include_router(chat.router, prefix="/api", tags=["chat"])

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """Health check."""
        return {"status": "ok"}

    return app
