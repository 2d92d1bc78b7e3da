"""FastAPI application serving the scrape endpoint.

The application exposes a single ``GET`` route at the configured metrics
path and ties the client's update jobs to the application lifespan: jobs
start when the server starts and are cancelled and joined on shutdown.

Example:
    >>> client = create_client(settings)
    >>> client.init(descriptors)
    >>> app = create_app(client, settings)
    >>> # Run with: uvicorn.run(app, host="0.0.0.0", port=2112)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.responses import Response

from .client import MonitoringClient
from .config.settings import MonitoringSettings, get_settings

logger = structlog.get_logger(__name__)


def create_app(client: MonitoringClient, settings: MonitoringSettings | None = None) -> FastAPI:
    """Build the scrape application for ``client``."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await client.start()
        logger.info("scrape.server.started", path=settings.metrics.path, metrics=len(client.registry))
        try:
            yield
        finally:
            await client.stop()
            logger.info("scrape.server.stopped")

    app = FastAPI(
        title=settings.service_name,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get(settings.metrics.path, include_in_schema=False)
    def scrape() -> Response:
        return Response(content=client.render(), media_type=client.content_type)

    return app


__all__ = ["create_app"]
