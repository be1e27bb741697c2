"""
Transaction Summary repository.

Merge-upserts of transaction sightings and explorer reads.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.transaction_summary import TransactionSummary
from indexer.repositories.base import BaseRepository


class TransactionSummaryRepository(BaseRepository[TransactionSummary]):
    """Repository for merged transaction summaries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(TransactionSummary, session)

    async def get_by_tx_hash(self, tx_hash: str) -> TransactionSummary | None:
        """
        Get transaction summary by hash.

        Args:
            tx_hash: Transaction hash

        Returns:
            Summary or None
        """
        return await self.get_by(tx_hash=tx_hash)

    async def merge(
        self,
        tx_hash: str,
        tx_kind: str | None,
        status: str | None,
        memo: str | None,
        sequence_no: int | None,
        block_height: int | None,
        public_key: str | None,
        token_id: str | None,
        payload: dict[str, Any] | None,
    ) -> None:
        """
        Create or merge a transaction summary.

        Every field takes the new value when present and keeps the stored
        value otherwise; block_height takes the maximum of both.

        Args:
            tx_hash: Transaction hash (identity)
            tx_kind: Record kind that produced this sighting
            status: Transaction status
            memo: Memo
            sequence_no: Sequence number
            block_height: Block height of this sighting
            public_key: Owning account
            token_id: Owning token
            payload: Record payload of this sighting
        """
        table = TransactionSummary
        stmt = self.insert_statement().values(
            tx_hash=tx_hash,
            tx_kind=tx_kind,
            status=status,
            memo=memo,
            sequence_no=sequence_no,
            block_height=block_height,
            public_key=public_key,
            token_id=token_id,
            payload_json=payload,
            created_at=datetime.now(UTC),
        )
        new = stmt.excluded
        stmt = stmt.on_conflict_do_update(
            index_elements=["tx_hash"],
            set_={
                "tx_kind": func.coalesce(new.tx_kind, table.tx_kind),
                "status": func.coalesce(new.status, table.status),
                "memo": func.coalesce(new.memo, table.memo),
                "sequence_no": func.coalesce(new.sequence_no, table.sequence_no),
                # NULL only when both sides are NULL
                "block_height": self.greatest(
                    func.coalesce(table.block_height, new.block_height),
                    func.coalesce(new.block_height, table.block_height),
                ),
                "public_key": func.coalesce(new.public_key, table.public_key),
                "token_id": func.coalesce(new.token_id, table.token_id),
                "payload_json": func.coalesce(new.payload_json, table.payload_json),
            },
        )
        await self.session.execute(stmt)

    async def list_for_account(
        self,
        public_key: str,
        token_id: str | None = None,
        limit: int = 50,
    ) -> list[TransactionSummary]:
        """
        Get account transactions, newest first.

        Args:
            public_key: Account public key
            token_id: Filter by token (None = any token)
            limit: Max results

        Returns:
            Summaries ordered by block height desc (nulls last), created_at desc
        """
        conditions = [TransactionSummary.public_key == public_key]
        if token_id is not None:
            conditions.append(TransactionSummary.token_id == token_id)

        stmt = (
            select(TransactionSummary)
            .where(*conditions)
            .order_by(
                TransactionSummary.block_height.desc().nulls_last(),
                TransactionSummary.created_at.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
