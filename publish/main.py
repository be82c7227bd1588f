"""
Publish FastAPI application.

Endpoints:
  POST <any path>   — store the request body, answer with its upload id
  any other method  — 400 "invalid method"
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from publish.config import AppConfig, config as default_config
from publish.api.routes import upload
from publish.core.context import UploadContext
from publish.storage.retention import RetentionScheduler
from publish.storage.sinks import FileSinkFactory, SinkFactory

logging.basicConfig(
    level=logging.DEBUG if default_config.debug else logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig | None = None,
    context: UploadContext | None = None,
    sinks: SinkFactory | None = None,
) -> FastAPI:
    """Build the application.  Tests pass their own context and sink factory."""
    config = config or default_config
    if sinks is None:
        sinks = FileSinkFactory(config.storage.data_dir, config.storage.write_buffer_bytes)

    retention = None
    if config.storage.retention_seconds is not None:
        retention = RetentionScheduler(config.storage.data_dir, config.storage.retention_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if isinstance(sinks, FileSinkFactory):
            sinks.ensure_data_dir()
        logger.info("%s %s started, storing uploads in %s",
                    config.app_name, config.version, config.storage.data_dir)
        yield
        if retention is not None:
            retention.cancel_all()
        logger.info("%s shutting down", config.app_name)

    app = FastAPI(
        title=config.app_name,
        version=config.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.context = context if context is not None else UploadContext()
    app.state.sinks = sinks
    app.state.retention = retention

    app.include_router(upload.router)
    app.add_exception_handler(405, upload.reject_unrouted_method)
    return app
