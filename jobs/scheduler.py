"""
Sweep scheduler.

Runs the account sync sweep on a fixed interval with APScheduler.
"""

from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from indexer.config.settings import settings
from jobs.tasks.account_sync_task import SweepReport, SweepRunner

SWEEP_JOB_ID = "account_sync_sweep"


def create_scheduler(
    runner: SweepRunner,
    interval_sec: int | None = None,
) -> AsyncIOScheduler:
    """
    Create scheduler with the sweep job registered.

    The first sweep runs immediately once the scheduler starts. Overlapping
    runs are prevented by max_instances=1 and by the runner's own lock.

    Args:
        runner: Sweep runner
        interval_sec: Seconds between sweeps (default: settings, floor 5)

    Returns:
        Configured scheduler (not started)
    """
    seconds = interval_sec or settings.sweep_interval_sec
    scheduler = AsyncIOScheduler(timezone=UTC)
    scheduler.add_job(
        runner.run_sweep,
        "interval",
        seconds=seconds,
        id=SWEEP_JOB_ID,
        name="Account sync sweep",
        kwargs={"reason": "interval"},
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(UTC),
    )
    logger.info(f"[Sweep] Scheduled every {seconds}s")
    return scheduler


__all__ = ["SWEEP_JOB_ID", "SweepReport", "SweepRunner", "create_scheduler"]
