"""Command line entry point serving registered metrics over HTTP.

Example:
-------
    >>> python -m monitoring_sdk --definitions metrics.yaml --port 2112
    >>> python -m monitoring_sdk  # serves the demonstration metrics

"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

import structlog
import uvicorn

from .client import create_client
from .config.definitions import load_definitions
from .config.settings import MonitoringSettings, load_settings
from .demo import SampleAverager, demo_descriptors
from .exceptions import MonitoringConfigurationError
from .http import create_app
from .utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve periodically updated metrics for scraping")
    parser.add_argument("--definitions", type=Path, default=None, help="YAML file with metric definitions")
    parser.add_argument("--host", default=None, help="Interface to bind (overrides settings)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (overrides settings)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides settings)")
    return parser


def _apply_overrides(settings: MonitoringSettings, args: argparse.Namespace) -> MonitoringSettings:
    if args.definitions is not None:
        settings.definitions_path = args.definitions
    if args.host is not None:
        settings.server.host = args.host
    if args.port is not None:
        settings.server.port = args.port
    if args.log_level is not None:
        settings.logging.level = args.log_level
    return settings


async def _serve(server: uvicorn.Server, averager: SampleAverager | None) -> None:
    feeder = asyncio.create_task(averager.feed_random()) if averager is not None else None
    try:
        await server.serve()
    finally:
        if feeder is not None:
            feeder.cancel()
            await asyncio.gather(feeder, return_exceptions=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the scrape server until interrupted.

    Returns:
        Process exit status; ``1`` on configuration errors.
    """
    args = build_parser().parse_args(argv)
    try:
        settings = _apply_overrides(load_settings(), args)
    except RuntimeError as exc:
        configure_logging()
        logger.error("monitoring.settings.invalid", error=str(exc))
        return 1
    configure_logging(settings=settings.logging)

    averager: SampleAverager | None = None
    try:
        client = create_client(settings)
        if settings.definitions_path is not None:
            descriptors = load_definitions(settings.definitions_path)
        else:
            averager = SampleAverager()
            descriptors = demo_descriptors(averager)
        client.init(descriptors)
    except MonitoringConfigurationError as exc:
        logger.error("monitoring.configuration.invalid", error=str(exc))
        return 1

    app = create_app(client, settings)
    config = uvicorn.Config(app, host=settings.server.host, port=settings.server.port, log_config=None)
    logger.info(
        "monitoring.serving",
        host=settings.server.host,
        port=settings.server.port,
        path=settings.metrics.path,
    )
    asyncio.run(_serve(uvicorn.Server(config), averager))
    return 0


__all__ = ["build_parser", "main"]
