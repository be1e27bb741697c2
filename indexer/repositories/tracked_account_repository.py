"""
Tracked Account repository.

Data access layer for the tracked-account registry.
"""

from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.tracked_account import TrackedAccount
from indexer.repositories.base import BaseRepository


class TrackedAccountRepository(BaseRepository[TrackedAccount]):
    """Repository for tracked accounts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(TrackedAccount, session)

    @staticmethod
    def _identity_clause(public_key: str, token_id: str | None):
        """WHERE clause matching identity (NULL token is its own value)."""
        token_clause = (
            TrackedAccount.token_id.is_(None)
            if token_id is None
            else TrackedAccount.token_id == token_id
        )
        return (TrackedAccount.public_key == public_key) & token_clause

    async def get_by_identity(
        self, public_key: str, token_id: str | None
    ) -> TrackedAccount | None:
        """
        Get tracked account by (public_key, token_id).

        Args:
            public_key: Account public key
            token_id: Token id or None

        Returns:
            Tracked account or None
        """
        stmt = select(TrackedAccount).where(
            self._identity_clause(public_key, token_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        public_key: str,
        token_id: str | None,
        sequencer_url: str,
        backfill: bool = False,
    ) -> TrackedAccount:
        """
        Register account or update an existing registration.

        Always re-enables the account. Never resets cursor_height or
        initialized, so re-registering does not restart progress.

        The row is created with INSERT ... ON CONFLICT DO NOTHING so that
        concurrent registrations of one identity converge on a single row
        (the partial unique index covers the NULL token).

        Args:
            public_key: Account public key
            token_id: Token id or None
            sequencer_url: Upstream GraphQL endpoint
            backfill: Historical ingest requested

        Returns:
            Created or updated account (flushed, not committed)
        """
        now = datetime.now(UTC)
        stmt = (
            self.insert_statement()
            .values(
                public_key=public_key,
                token_id=token_id,
                sequencer_url=sequencer_url,
                backfill=backfill,
                enabled=True,
                initialized=False,
                error_count=0,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing()
        )
        await self.session.execute(stmt)

        account = await self.get_by_identity(public_key, token_id)
        if account is None:
            raise RuntimeError(
                f"Tracked account row missing after insert: {public_key}"
            )
        account.sequencer_url = sequencer_url
        account.backfill = backfill
        account.enabled = True
        account.updated_at = now

        await self.session.flush()
        return account

    async def list_enabled(self) -> list[TrackedAccount]:
        """
        Get enabled accounts, stalest first.

        Returns:
            Accounts ordered by updated_at ascending
        """
        stmt = (
            select(TrackedAccount)
            .where(TrackedAccount.enabled.is_(True))
            .order_by(TrackedAccount.updated_at.asc(), TrackedAccount.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int) -> list[TrackedAccount]:
        """
        Get accounts, most recently updated first.

        Args:
            limit: Max results

        Returns:
            List of tracked accounts
        """
        stmt = (
            select(TrackedAccount)
            .order_by(TrackedAccount.updated_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_enabled(self) -> int:
        """Count enabled accounts."""
        stmt = (
            select(func.count())
            .select_from(TrackedAccount)
            .where(TrackedAccount.enabled.is_(True))
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def advance_cursor(self, account_id: int, height: int) -> None:
        """
        Advance cursor and mark account initialized.

        The cursor becomes max(current or 0, height); it never regresses.

        Args:
            account_id: Tracked account ID
            height: Newly observed height
        """
        now = datetime.now(UTC)
        stmt = (
            update(TrackedAccount)
            .where(TrackedAccount.id == account_id)
            .values(
                initialized=True,
                cursor_height=self.greatest(
                    func.coalesce(TrackedAccount.cursor_height, 0), height
                ),
                last_sync_at=now,
                updated_at=now,
                last_error=None,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def record_failure(self, account_id: int, error: str) -> None:
        """
        Record a failed sync attempt.

        Touches updated_at so the account moves behind the others in the
        next sweep.

        Args:
            account_id: Tracked account ID
            error: Error description
        """
        stmt = (
            update(TrackedAccount)
            .where(TrackedAccount.id == account_id)
            .values(
                last_error=error[:2000],
                error_count=TrackedAccount.error_count + 1,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
