"""
Sync Cursor repository.

Data access layer for per-source progress markers.
"""

from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.sync_cursor import SyncCursor
from indexer.repositories.base import BaseRepository


class SyncCursorRepository(BaseRepository[SyncCursor]):
    """Repository for sync progress markers."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(SyncCursor, session)

    async def get_by_source(self, source: str) -> SyncCursor | None:
        """Get marker by source key."""
        return await self.get_by(source=source)

    async def mark_progress(
        self,
        source: str,
        height: int,
        state_hash: str | None = None,
    ) -> None:
        """
        Record sync progress for a source.

        last_height never regresses; the state hash is replaced only
        when one is given.

        Args:
            source: Source key (account:<public_key>:<token_id>)
            height: Height reached by this sync
            state_hash: State hash of the block at that height, if known
        """
        now = datetime.now(UTC)
        stmt = self.insert_statement().values(
            source=source,
            last_height=height,
            last_state_hash=state_hash,
            updated_at=now,
        )
        new = stmt.excluded
        stmt = stmt.on_conflict_do_update(
            index_elements=["source"],
            set_={
                "last_height": self.greatest(
                    func.coalesce(SyncCursor.last_height, 0),
                    func.coalesce(new.last_height, 0),
                ),
                "last_state_hash": func.coalesce(
                    new.last_state_hash, SyncCursor.last_state_hash
                ),
                "updated_at": new.updated_at,
            },
        )
        await self.session.execute(stmt)
