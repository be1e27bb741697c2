"""
Account Sync Background Task.

Sweeps every enabled tracked account:
1. Accounts are taken stalest first (updated_at ascending)
2. Each account is synced in its own session and transaction
3. A failing account is recorded and skipped; the sweep continues

Only one sweep runs at a time. A trigger that arrives while a sweep is
in flight is dropped, not queued.
"""

import asyncio
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from indexer.config.constants import SYNC_MODE_LATEST_PRIME
from indexer.config.database import async_session_maker
from indexer.config.settings import settings
from indexer.repositories.tracked_account_repository import (
    TrackedAccountRepository,
)
from indexer.services.account_sync import AccountSyncService
from indexer.services.sequencer.base import ArchiveSource
from indexer.utils.exceptions import is_expected_sync_failure
from indexer.utils.security import mask_public_key


@dataclass
class SweepReport:
    """Totals for one sweep."""

    synced: int = 0
    failed: int = 0
    primed: int = 0
    events: int = 0
    actions: int = 0

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "synced": self.synced,
            "failed": self.failed,
            "primed": self.primed,
            "ingested": {"events": self.events, "actions": self.actions},
        }


class SweepRunner:
    """Single-flight sweep over all enabled tracked accounts."""

    def __init__(
        self,
        source: ArchiveSource,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
        start_mode: str | None = None,
        enabled: bool | None = None,
    ) -> None:
        """
        Initialize sweep runner.

        Args:
            source: Upstream archive source shared by all syncs
            session_maker: Session factory (default: application factory)
            start_mode: latest or backfill (default: from settings)
            enabled: Ingestion switch (default: from settings)
        """
        self.source = source
        self.session_maker = session_maker or async_session_maker
        self.start_mode = start_mode or settings.start_mode
        self.enabled = settings.ingest_enabled if enabled is None else enabled
        self._lock = asyncio.Lock()
        self._kicked: set[asyncio.Task] = set()

    @property
    def busy(self) -> bool:
        """Check if a sweep is in flight."""
        return self._lock.locked()

    async def run_sweep(self, reason: str = "interval") -> SweepReport | None:
        """
        Run one sweep.

        Args:
            reason: Trigger label passed to each account sync

        Returns:
            Sweep report, or None if another sweep is already running
        """
        if not self.enabled:
            logger.debug("[Sweep] Ingestion disabled, skipping")
            return SweepReport()

        if self._lock.locked():
            logger.debug(f"[Sweep] Busy, dropping trigger (reason={reason})")
            return None

        async with self._lock:
            return await self._sweep(reason)

    def kick(self, reason: str = "kick") -> asyncio.Task:
        """
        Trigger a sweep out of band without waiting for it.

        Returns:
            Task running the sweep
        """
        task = asyncio.create_task(self.run_sweep(reason=reason))
        self._kicked.add(task)
        task.add_done_callback(self._kicked.discard)
        return task

    async def _sweep(self, reason: str) -> SweepReport:
        report = SweepReport()

        async with self.session_maker() as session:
            accounts = await TrackedAccountRepository(session).list_enabled()
            account_ids = [account.id for account in accounts]

        for account_id in account_ids:
            await self._sync_one(account_id, reason, report)

        if account_ids:
            logger.info(
                f"[Sweep] Done: {len(account_ids)} accounts, "
                f"synced={report.synced} primed={report.primed} "
                f"failed={report.failed} events=+{report.events} "
                f"actions=+{report.actions}"
            )
        return report

    async def _sync_one(
        self, account_id: int, reason: str, report: SweepReport
    ) -> None:
        """Sync one account, recording failure instead of raising."""
        async with self.session_maker() as session:
            masked = f"account {account_id}"
            try:
                account = await TrackedAccountRepository(session).get_by_id(
                    account_id
                )
                if account is None or not account.enabled:
                    return

                masked = mask_public_key(account.public_key)
                service = AccountSyncService(
                    session, self.source, start_mode=self.start_mode
                )
                result = await service.sync(account, reason=reason)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                report.failed += 1
                if is_expected_sync_failure(e):
                    logger.error(f"[Sweep] Sync failed for {masked}: {e}")
                else:
                    logger.exception(
                        f"[Sweep] Unexpected error syncing {masked}: {e}"
                    )
                await self._record_failure(session, account_id, e)
                return

        report.synced += 1
        report.events += result.events_ingested
        report.actions += result.actions_ingested
        if result.mode == SYNC_MODE_LATEST_PRIME:
            report.primed += 1
            logger.info(
                f"[Sweep] Primed {masked} at height {result.cursor_height}"
            )
        elif result.total_ingested:
            logger.info(
                f"[Sweep] {masked}: +{result.events_ingested} events, "
                f"+{result.actions_ingested} actions, "
                f"cursor={result.cursor_height}"
            )

    @staticmethod
    async def _record_failure(
        session: AsyncSession, account_id: int, error: Exception
    ) -> None:
        """Store last_error and bump error_count for an account."""
        message = str(error) or error.__class__.__name__
        try:
            await session.rollback()
            await TrackedAccountRepository(session).record_failure(
                account_id, message
            )
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(
                f"[Sweep] Could not record failure for account {account_id}: {e}"
            )
