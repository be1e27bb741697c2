"""
Logging setup.

Configures loguru sinks for the indexer process.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from indexer.config.settings import settings


def setup_logging() -> None:
    """Configure stderr sink and rotating file sink."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.log_level.upper(),
            encoding="utf-8",
        )

    logger.info("Starting Zeko indexer...")
