"""
Archive record repository.

Content-addressed inserts for raw events/actions and raw-table lookups.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from indexer.models.archive_record import AccountAction, AccountEvent
from indexer.repositories.base import BaseRepository


class ArchiveRecordRepository(BaseRepository[AccountEvent]):
    """Repository for raw account events and actions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(AccountEvent, session)

    async def _insert_ignore(
        self, model: type[AccountEvent] | type[AccountAction], values: dict
    ) -> bool:
        """INSERT ... ON CONFLICT (payload_hash) DO NOTHING."""
        stmt = (
            self.insert_statement(model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["payload_hash"])
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def insert_event(
        self,
        payload_hash: str,
        public_key: str,
        token_id: str | None,
        tx_hash: str | None,
        block_height: int | None,
        payload: dict[str, Any],
    ) -> bool:
        """
        Insert raw event unless its payload hash is already stored.

        Args:
            payload_hash: Content hash (de-duplication key)
            public_key: Owning account
            token_id: Owning token
            tx_hash: Transaction hash if present
            block_height: Block height
            payload: Verbatim record

        Returns:
            True if a new row was inserted, False for an already-seen record
        """
        return await self._insert_ignore(
            AccountEvent,
            {
                "payload_hash": payload_hash,
                "public_key": public_key,
                "token_id": token_id,
                "tx_hash": tx_hash,
                "block_height": block_height,
                "payload_json": payload,
            },
        )

    async def insert_action(
        self,
        payload_hash: str,
        public_key: str,
        token_id: str | None,
        tx_hash: str | None,
        block_height: int | None,
        action_state_before: str | None,
        action_state_after: str | None,
        payload: dict[str, Any],
    ) -> bool:
        """
        Insert raw action unless its payload hash is already stored.

        Returns:
            True if a new row was inserted, False for an already-seen record
        """
        return await self._insert_ignore(
            AccountAction,
            {
                "payload_hash": payload_hash,
                "public_key": public_key,
                "token_id": token_id,
                "tx_hash": tx_hash,
                "block_height": block_height,
                "action_state_before": action_state_before,
                "action_state_after": action_state_after,
                "payload_json": payload,
            },
        )

    async def find_by_tx_hash(
        self, tx_hash: str
    ) -> AccountEvent | AccountAction | None:
        """
        Find first raw record for a transaction hash.

        Events are checked before actions.

        Args:
            tx_hash: Transaction hash

        Returns:
            Raw record or None
        """
        for model in (AccountEvent, AccountAction):
            stmt = select(model).where(model.tx_hash == tx_hash).limit(1)
            result = await self.session.execute(stmt)
            record = result.scalars().first()
            if record is not None:
                return record
        return None

    async def count_for_account(
        self, public_key: str, token_id: str | None
    ) -> dict[str, int]:
        """
        Count stored raw records for an account.

        Returns:
            Dict with events and actions counts
        """
        counts = {}
        for name, model in (("events", AccountEvent), ("actions", AccountAction)):
            token_clause = (
                model.token_id.is_(None)
                if token_id is None
                else model.token_id == token_id
            )
            stmt = (
                select(func.count())
                .select_from(model)
                .where(model.public_key == public_key, token_clause)
            )
            result = await self.session.execute(stmt)
            counts[name] = result.scalar() or 0
        return counts
