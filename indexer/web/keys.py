"""Typed application keys shared by the HTTP handlers."""

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from indexer.services.sequencer.base import ArchiveSource

SESSION_MAKER_KEY = web.AppKey("session_maker", async_sessionmaker[AsyncSession])
SOURCE_KEY = web.AppKey("source", ArchiveSource)
SWEEP_RUNNER_KEY = web.AppKey("sweep_runner", object)
START_MODE_KEY = web.AppKey("start_mode", str)
INGEST_ENABLED_KEY = web.AppKey("ingest_enabled", bool)
