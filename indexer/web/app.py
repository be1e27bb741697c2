"""
Explorer API application.

Builds the aiohttp application and manages its runner.
"""

import asyncio

from aiohttp import web
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from indexer.config.database import async_session_maker
from indexer.config.settings import settings
from indexer.services.sequencer.base import ArchiveSource
from indexer.web.keys import (
    INGEST_ENABLED_KEY,
    SESSION_MAKER_KEY,
    SOURCE_KEY,
    START_MODE_KEY,
    SWEEP_RUNNER_KEY,
)
from indexer.web.middleware import error_middleware
from indexer.web.routes import routes
from jobs.health import register_health_routes
from jobs.tasks.account_sync_task import SweepRunner


def create_app(
    source: ArchiveSource,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    sweep_runner: SweepRunner | None = None,
    start_mode: str | None = None,
    ingest_enabled: bool | None = None,
) -> web.Application:
    """
    Create the explorer API application.

    Args:
        source: Archive source used by manual syncs
        session_maker: Session factory (default: application factory)
        sweep_runner: Runner for POST /v2/sweep (optional)
        start_mode: latest or backfill (default: from settings)
        ingest_enabled: Ingestion switch (default: from settings)

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[error_middleware])
    app[SESSION_MAKER_KEY] = session_maker or async_session_maker
    app[SOURCE_KEY] = source
    app[START_MODE_KEY] = start_mode or settings.start_mode
    app[INGEST_ENABLED_KEY] = (
        settings.ingest_enabled if ingest_enabled is None else ingest_enabled
    )
    if sweep_runner is not None:
        app[SWEEP_RUNNER_KEY] = sweep_runner

    register_health_routes(app)
    app.router.add_routes(routes)
    return app


async def start_api_server(
    app: web.Application,
    host: str | None = None,
    port: int | None = None,
) -> web.AppRunner:
    """
    Start serving the application.

    Args:
        app: Application from create_app
        host: Host to bind to (default: settings)
        port: Port to bind to (default: settings)

    Returns:
        AppRunner for cleanup
    """
    host = host or settings.host
    port = port or settings.port

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"[API] Listening on http://{host}:{port}")
    return runner


async def stop_api_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop API server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    logger.info("[API] Stopping server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("[API] Server stopped")
    except TimeoutError:
        logger.warning(f"[API] Server cleanup timed out after {timeout}s")
