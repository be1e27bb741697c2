"""
Account Sync Ingestion Mixin.

Provides idempotent ingestion of archive records.
"""

from indexer.models.tracked_account import TrackedAccount
from indexer.services.sequencer.records import (
    ArchiveAction,
    ArchiveEvent,
    ArchiveRecord,
)

from .hashing import payload_hash


class IngestionMixin:
    """Mixin providing raw-record ingestion and transaction merging."""

    async def _ingest_events(
        self,
        account: TrackedAccount,
        events: list[ArchiveEvent],
    ) -> int:
        """
        Ingest events for an account.

        Args:
            account: Owning tracked account
            events: Events above the cursor

        Returns:
            Number of newly inserted event rows
        """
        inserted = 0
        for event in events:
            is_new = await self.archive_repo.insert_event(
                payload_hash=payload_hash(event.payload),
                public_key=account.public_key,
                token_id=account.token_id,
                tx_hash=event.tx_hash,
                block_height=event.block.height,
                payload=event.payload,
            )
            if is_new:
                inserted += 1
            await self._record_side_data(account, event)
        return inserted

    async def _ingest_actions(
        self,
        account: TrackedAccount,
        actions: list[ArchiveAction],
    ) -> int:
        """
        Ingest actions for an account.

        Args:
            account: Owning tracked account
            actions: Actions above the cursor

        Returns:
            Number of newly inserted action rows
        """
        inserted = 0
        for action in actions:
            is_new = await self.archive_repo.insert_action(
                payload_hash=payload_hash(action.payload),
                public_key=account.public_key,
                token_id=account.token_id,
                tx_hash=action.tx_hash,
                block_height=action.block.height,
                action_state_before=action.action_state_before,
                action_state_after=action.action_state_after,
                payload=action.payload,
            )
            if is_new:
                inserted += 1
            await self._record_side_data(account, action)
        return inserted

    async def _record_side_data(
        self,
        account: TrackedAccount,
        record: ArchiveRecord,
    ) -> None:
        """
        Record block header and merge transaction summary.

        Runs for duplicates too: a re-observed record may carry
        transaction fields that were missing on an earlier sighting.
        """
        await self.block_repo.record_block(record.block)

        if not record.tx_hash:
            return

        tx = record.transaction
        await self.tx_repo.merge(
            tx_hash=record.tx_hash,
            tx_kind=record.kind,
            status=tx.status,
            memo=tx.memo,
            sequence_no=tx.sequence_no,
            block_height=record.block.height,
            public_key=account.public_key,
            token_id=account.token_id,
            payload=record.payload,
        )
