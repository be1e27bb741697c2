"""
Account Sync Core Service.

Main service class that combines all sync functionality.
Inherits from mixins to provide ingestion and cursor methods.
"""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.config.constants import (
    START_MODE_BACKFILL,
    START_MODE_LATEST,
    SYNC_MODE_LATEST_PRIME,
)
from indexer.config.settings import settings
from indexer.models.tracked_account import TrackedAccount
from indexer.repositories.archive_record_repository import (
    ArchiveRecordRepository,
)
from indexer.repositories.block_repository import BlockRepository
from indexer.repositories.sync_cursor_repository import SyncCursorRepository
from indexer.repositories.tracked_account_repository import (
    TrackedAccountRepository,
)
from indexer.repositories.transaction_summary_repository import (
    TransactionSummaryRepository,
)
from indexer.services.sequencer.base import ArchiveSource
from indexer.utils.security import mask_public_key

from .cursor_mixin import CursorMixin
from .ingestion_mixin import IngestionMixin
from .result import SyncResult

LATEST_PRIME_NOTE = (
    "Primed cursor at latest height; older history intentionally "
    "skipped in latest start mode."
)


class AccountSyncService(IngestionMixin, CursorMixin):
    """
    Incremental sync of one tracked account.

    Each call fetches the account's full archive, ingests only the
    records above the account cursor, and advances the cursor in the
    same transaction. Re-running a sync is harmless: raw rows are keyed
    by content hash and the cursor only moves forward.
    """

    def __init__(
        self,
        session: AsyncSession,
        source: ArchiveSource,
        start_mode: str | None = None,
    ):
        """
        Initialize sync service.

        Args:
            session: Database session (the service commits on it)
            source: Upstream archive source
            start_mode: latest or backfill (default: from settings)
        """
        self.session = session
        self.source = source
        self.start_mode = start_mode or settings.start_mode

        self.account_repo = TrackedAccountRepository(session)
        self.archive_repo = ArchiveRecordRepository(session)
        self.tx_repo = TransactionSummaryRepository(session)
        self.cursor_repo = SyncCursorRepository(session)
        self.block_repo = BlockRepository(session)

    def _mode_for(self, account: TrackedAccount) -> str:
        """Reported mode for a regular (non-prime) sync."""
        if account.backfill or self.start_mode == START_MODE_BACKFILL:
            return START_MODE_BACKFILL
        return START_MODE_LATEST

    async def sync(
        self,
        account: TrackedAccount,
        reason: str = "manual",
    ) -> SyncResult:
        """
        Sync one tracked account.

        Args:
            account: Tracked account (its cursor is refreshed on success)
            reason: Trigger label (manual, interval, ...)

        Returns:
            Sync result

        Raises:
            UpstreamError: If the sequencer fetch fails (nothing written)
            SQLAlchemyError: If the write transaction fails (rolled back)
        """
        masked = mask_public_key(account.public_key)
        current_cursor = account.cursor_height

        # Fetch happens before any write.
        archive = await self.source.fetch_account_archive(
            account.sequencer_url,
            account.public_key,
            account.token_id,
        )
        latest_height = archive.latest_height
        state_hash = archive.latest_state_hash()

        primed = self._should_prime_latest(account)
        events_ingested = actions_ingested = 0
        next_cursor = self._next_cursor(current_cursor, latest_height)

        try:
            if not primed:
                events, actions = archive.records_above(current_cursor)
                events_ingested = await self._ingest_events(account, events)
                actions_ingested = await self._ingest_actions(account, actions)

            await self._advance(account, next_cursor, state_hash)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._reload(account)

        if primed:
            logger.info(
                f"[Sync] Primed {masked} at height {next_cursor} "
                f"(reason={reason})"
            )
            return SyncResult(
                mode=SYNC_MODE_LATEST_PRIME,
                reason=reason,
                events_ingested=0,
                actions_ingested=0,
                latest_height=latest_height,
                cursor_height=self._cursor_of(account, next_cursor),
                note=LATEST_PRIME_NOTE,
            )

        if events_ingested or actions_ingested:
            logger.info(
                f"[Sync] {masked}: +{events_ingested} events, "
                f"+{actions_ingested} actions, cursor {current_cursor} -> "
                f"{next_cursor} (reason={reason})"
            )
        else:
            logger.debug(
                f"[Sync] {masked}: no new records, cursor {next_cursor} "
                f"(reason={reason})"
            )

        return SyncResult(
            mode=self._mode_for(account),
            reason=reason,
            events_ingested=events_ingested,
            actions_ingested=actions_ingested,
            latest_height=latest_height,
            cursor_height=self._cursor_of(account, next_cursor),
        )

    async def _reload(self, account: TrackedAccount) -> None:
        """Refresh account state written through bulk UPDATEs."""
        if account not in self.session:
            return
        try:
            await self.session.refresh(account)
        except SQLAlchemyError as e:
            # Already committed; the result falls back to the computed cursor
            logger.warning(
                f"[Sync] Could not reload {mask_public_key(account.public_key)} "
                f"after commit: {e}"
            )

    @staticmethod
    def _cursor_of(account: TrackedAccount, fallback: int) -> int:
        """Stored cursor, or the computed one for detached accounts."""
        if account.cursor_height is None:
            return fallback
        return max(account.cursor_height, fallback)
