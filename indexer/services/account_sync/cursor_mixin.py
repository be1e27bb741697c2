"""
Account Sync Cursor Mixin.

Provides cursor bookkeeping for tracked accounts.
"""

from indexer.config.constants import START_MODE_LATEST
from indexer.models.tracked_account import TrackedAccount


class CursorMixin:
    """Mixin providing cursor decisions and advancement."""

    def _should_prime_latest(self, account: TrackedAccount) -> bool:
        """
        Check if the account takes the latest-prime branch.

        Only never-initialized accounts, in latest mode, without a
        per-account backfill override skip their history.
        """
        return (
            not account.initialized
            and self.start_mode == START_MODE_LATEST
            and not account.backfill
        )

    @staticmethod
    def _next_cursor(current: int | None, latest_height: int) -> int:
        """Cursor after a sync: max(current or 0, latest)."""
        return max(current or 0, latest_height)

    async def _advance(
        self,
        account: TrackedAccount,
        next_cursor: int,
        state_hash: str | None,
    ) -> None:
        """
        Advance account cursor and its progress marker.

        Must run inside the same transaction as the ingested rows.
        """
        await self.account_repo.advance_cursor(account.id, next_cursor)
        await self.cursor_repo.mark_progress(
            source=account.source_key,
            height=next_cursor,
            state_hash=state_hash,
        )
