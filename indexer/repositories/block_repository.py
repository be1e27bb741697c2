"""
Block repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.block import Block
from indexer.repositories.base import BaseRepository
from indexer.services.sequencer.records import BlockInfo


class BlockRepository(BaseRepository[Block]):
    """Repository for observed block headers."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Block, session)

    async def record_block(self, info: BlockInfo) -> bool:
        """
        Store block header unless already known.

        Headers without a state hash or height are skipped.

        Args:
            info: Block info from an ingested record

        Returns:
            True if a new block row was inserted
        """
        if not info.state_hash or info.height is None:
            return False

        stmt = (
            self.insert_statement()
            .values(
                height=info.height,
                state_hash=info.state_hash,
                parent_hash=info.parent_hash,
                timestamp_ms=info.timestamp_ms,
                global_slot=info.global_slot,
            )
            .on_conflict_do_nothing(index_elements=["state_hash"])
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def get_by_height(self, height: int) -> list[Block]:
        """Get blocks seen at a height (forks may yield several)."""
        stmt = select(Block).where(Block.height == height).order_by(Block.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
