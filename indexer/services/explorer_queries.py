"""
Explorer query service.

Read-only lookups served from the local store: transactions by hash,
account histories and indexer health.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.config.settings import settings
from indexer.repositories.archive_record_repository import (
    ArchiveRecordRepository,
)
from indexer.repositories.tracked_account_repository import (
    TrackedAccountRepository,
)
from indexer.repositories.transaction_summary_repository import (
    TransactionSummaryRepository,
)
from indexer.services.base_service import BaseService
from indexer.utils.security import mask_tx_hash
from indexer.utils.validation import as_nullable_string, parse_limit


class ExplorerQueryService(BaseService):
    """Read-side queries for the explorer API."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query service."""
        super().__init__(session)
        self.tx_repo = TransactionSummaryRepository(session)
        self.archive_repo = ArchiveRecordRepository(session)
        self.account_repo = TrackedAccountRepository(session)

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """
        Look up a transaction by hash.

        The summary table is checked first; raw events and actions are
        the fallback, tagged with their source table.

        Args:
            tx_hash: Transaction hash

        Returns:
            Transaction dict or None if unknown
        """
        tx_hash = (tx_hash or "").strip()
        if not tx_hash:
            return None

        summary = await self.tx_repo.get_by_tx_hash(tx_hash)
        if summary is not None:
            data = summary.to_dict()
            data["source"] = "transactions"
            return data

        raw = await self.archive_repo.find_by_tx_hash(tx_hash)
        if raw is None:
            self.logger.debug(f"[Explorer] Unknown tx {mask_tx_hash(tx_hash)}")
            return None
        return raw.to_dict()

    async def list_account_transactions(
        self,
        public_key: str,
        token_id: Any = None,
        limit: Any = None,
    ) -> list[dict[str, Any]]:
        """
        List an account's transactions, newest first.

        Args:
            public_key: Account public key
            token_id: Optional token filter
            limit: Raw limit (default 50, capped at 500)

        Returns:
            List of transaction dicts (payload omitted)
        """
        rows = await self.tx_repo.list_for_account(
            public_key=public_key.strip(),
            token_id=as_nullable_string(token_id),
            limit=parse_limit(limit),
        )
        return [row.to_dict(include_payload=False) for row in rows]

    async def get_health(self) -> dict[str, Any]:
        """
        Collect indexer health.

        Returns:
            Dict with database reachability, start mode, ingest
            settings and enabled account count
        """
        db_ok = True
        enabled_accounts = None
        try:
            await self.session.execute(text("SELECT 1"))
            enabled_accounts = await self.account_repo.count_enabled()
        except SQLAlchemyError as e:
            db_ok = False
            self.logger.error(f"[Health] Database check failed: {e}")

        return {
            "ok": db_ok,
            "database": db_ok,
            "startMode": settings.start_mode,
            "ingestEnabled": settings.ingest_enabled,
            "ingestIntervalSec": settings.sweep_interval_sec,
            "trackedAccounts": enabled_accounts,
        }
