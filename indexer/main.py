"""
Indexer process entry point.

Starts the explorer API and the sweep scheduler in one event loop.
"""

import asyncio

from loguru import logger

from indexer.config.database import dispose_engine, init_models
from indexer.config.settings import settings
from indexer.logging_setup import setup_logging
from indexer.services.sequencer import SequencerGraphQLClient
from indexer.utils.security import mask_url
from indexer.web.app import create_app, start_api_server, stop_api_server
from jobs.health import set_scheduler
from jobs.scheduler import create_scheduler
from jobs.tasks.account_sync_task import SweepRunner


async def main() -> None:
    """Run API and scheduler until cancelled."""
    setup_logging()

    logger.info(
        f"START_MODE={settings.start_mode}, "
        f"INGEST_ENABLED={settings.ingest_enabled}, "
        f"INGEST_INTERVAL_SEC={settings.sweep_interval_sec}"
    )
    logger.info(
        f"Default sequencer: {mask_url(settings.default_sequencer_url)}"
    )
    if settings.is_backfill:
        logger.warning(
            "Backfill mode is enabled. On larger chains ensure sufficient "
            "CPU/RAM/disk and sustained I/O capacity."
        )

    if settings.auto_create_schema:
        await init_models()

    client = SequencerGraphQLClient()
    runner = SweepRunner(client)
    scheduler = None
    if settings.ingest_enabled:
        scheduler = create_scheduler(runner)
        scheduler.start()
        set_scheduler(scheduler)
    else:
        logger.warning("Ingestion disabled; serving stored data only")

    app = create_app(client, sweep_runner=runner)
    api_runner = await start_api_server(app)

    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        logger.info("Shutdown requested")
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            set_scheduler(None)
        await stop_api_server(api_runner)
        await client.close()
        await dispose_engine()
        logger.info("Indexer stopped")


def run() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
