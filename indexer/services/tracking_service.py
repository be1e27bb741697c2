"""
Tracked account registry service.

Registers accounts for incremental sync and runs manual syncs.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from indexer.config.constants import START_MODE_BACKFILL, TRACKED_ACCOUNTS_LIMIT
from indexer.config.settings import settings
from indexer.models.tracked_account import TrackedAccount
from indexer.repositories.tracked_account_repository import (
    TrackedAccountRepository,
)
from indexer.services.account_sync import AccountSyncService, SyncResult
from indexer.services.base_service import BaseService, transaction
from indexer.services.sequencer.base import ArchiveSource
from indexer.utils.exceptions import InvalidRequestError
from indexer.utils.security import mask_public_key
from indexer.utils.validation import (
    as_nullable_string,
    bool_or_default,
    safe_sequencer_url,
)


class TrackingService(BaseService):
    """Service for the tracked account registry."""

    def __init__(
        self,
        session: AsyncSession,
        source: ArchiveSource | None = None,
        start_mode: str | None = None,
    ) -> None:
        """
        Initialize tracking service.

        Args:
            session: Database session
            source: Archive source (required for sync_account)
            start_mode: latest or backfill (default: from settings)
        """
        super().__init__(session)
        self.source = source
        self.start_mode = start_mode or settings.start_mode
        self.account_repo = TrackedAccountRepository(session)

    def normalize_identity(
        self,
        public_key: Any,
        token_id: Any = None,
        sequencer_url: Any = None,
        backfill: Any = None,
    ) -> tuple[str, str | None, str, bool]:
        """
        Normalize registration input.

        Args:
            public_key: Account public key (required)
            token_id: Token id, blank means default token
            sequencer_url: http(s) endpoint, blank means default
            backfill: Loose boolean, default follows start mode

        Returns:
            Tuple of (public_key, token_id, sequencer_url, backfill)

        Raises:
            InvalidRequestError: If public key is missing or URL invalid
        """
        key = as_nullable_string(public_key)
        if not key:
            raise InvalidRequestError("publicKey is required")

        url = safe_sequencer_url(sequencer_url, settings.default_sequencer_url)
        default_backfill = self.start_mode == START_MODE_BACKFILL
        return (
            key,
            as_nullable_string(token_id),
            url,
            bool_or_default(backfill, default_backfill),
        )

    @transaction
    async def track_account(
        self,
        public_key: Any,
        token_id: Any = None,
        sequencer_url: Any = None,
        backfill: Any = None,
    ) -> TrackedAccount:
        """
        Register or update a tracked account.

        Re-registering keeps the cursor, so progress is never restarted.

        Returns:
            Tracked account (committed)

        Raises:
            InvalidRequestError: If input is invalid
        """
        key, token, url, wants_backfill = self.normalize_identity(
            public_key, token_id, sequencer_url, backfill
        )
        account = await self.account_repo.upsert(
            public_key=key,
            token_id=token,
            sequencer_url=url,
            backfill=wants_backfill,
        )
        self.logger.info(
            f"[Registry] Tracking {mask_public_key(key)} "
            f"token={token or '-'} backfill={wants_backfill}"
        )
        return account

    async def sync_account(
        self,
        public_key: Any,
        token_id: Any = None,
        sequencer_url: Any = None,
        backfill: Any = None,
    ) -> tuple[TrackedAccount, SyncResult]:
        """
        Register account and sync it once.

        Failures propagate to the caller; the registration itself is
        already committed and stays in place.

        Returns:
            Tuple of (tracked account, sync result)

        Raises:
            InvalidRequestError: If input is invalid
            UpstreamError: If the sequencer fetch fails
        """
        if self.source is None:
            raise RuntimeError("TrackingService.sync_account needs a source")

        account = await self.track_account(
            public_key, token_id, sequencer_url, backfill
        )
        sync_service = AccountSyncService(
            self.session, self.source, start_mode=self.start_mode
        )
        result = await sync_service.sync(account, reason="manual")
        return account, result

    async def list_tracked_accounts(
        self, limit: int = TRACKED_ACCOUNTS_LIMIT
    ) -> list[TrackedAccount]:
        """Get tracked accounts, most recently updated first."""
        return await self.account_repo.list_recent(
            min(limit, TRACKED_ACCOUNTS_LIMIT)
        )

    async def get_account(
        self, public_key: str, token_id: str | None = None
    ) -> TrackedAccount | None:
        """Get tracked account by identity."""
        return await self.account_repo.get_by_identity(
            public_key, as_nullable_string(token_id)
        )
