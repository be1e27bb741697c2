#!/usr/bin/env python3
"""Create indexer tables out of band (checkfirst, no migrations)."""

import asyncio
import sys

from loguru import logger

from indexer.config.database import dispose_engine, init_models
from indexer.config.settings import settings

logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all indexer tables that do not exist yet."""
    logger.info(f"Connecting to {settings.database_url.split('://', 1)[0]} database...")
    try:
        await init_models()
    finally:
        await dispose_engine()
    logger.success("Indexer tables ready")


if __name__ == "__main__":
    asyncio.run(init_database())
