"""
Health check endpoints for the indexer process.

Reports database reachability, ingest configuration and scheduler state.
"""

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from indexer.services.explorer_queries import ExplorerQueryService
from indexer.web.keys import (
    INGEST_ENABLED_KEY,
    SESSION_MAKER_KEY,
    SWEEP_RUNNER_KEY,
)

# Global scheduler reference for health checks
_scheduler: AsyncIOScheduler | None = None


def set_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """
    Set the scheduler instance for health checks.

    Args:
        scheduler: AsyncIOScheduler instance to monitor (None to clear)
    """
    global _scheduler
    _scheduler = scheduler
    if scheduler is not None:
        logger.info("Scheduler registered for health checks")


def _scheduler_info() -> dict:
    """Describe scheduler state and its jobs."""
    if _scheduler is None:
        return {"scheduler_running": False, "jobs": []}

    return {
        "scheduler_running": _scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": (
                    job.next_run_time.isoformat() if job.next_run_time else None
                ),
            }
            for job in _scheduler.get_jobs()
        ],
    }


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with database and scheduler status
    """
    async with request.app[SESSION_MAKER_KEY]() as session:
        health = await ExplorerQueryService(session).get_health()

    health.update(_scheduler_info())
    runner = request.app.get(SWEEP_RUNNER_KEY)
    health["sweepBusy"] = runner.busy if runner is not None else False
    return web.json_response(health, status=200 if health["ok"] else 503)


async def readiness_handler(request: web.Request) -> web.Response:
    """
    Readiness check endpoint.

    Ready once the scheduler runs, or immediately when ingestion is
    disabled and no scheduler was started.
    """
    ingest_enabled = request.app.get(INGEST_ENABLED_KEY, True)
    if ingest_enabled and (_scheduler is None or not _scheduler.running):
        return web.json_response(
            {"status": "not_ready", "ready": False},
            status=503,
        )

    return web.json_response({"status": "ready", "ready": True})


async def liveness_handler(request: web.Request) -> web.Response:
    """
    Liveness check endpoint.

    Returns:
        JSON response indicating if the process is alive
    """
    return web.json_response({"status": "alive", "alive": True})


def register_health_routes(app: web.Application) -> None:
    """Mount health, readiness and liveness routes."""
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
