"""Unit tests for the account sync engine (SQLite-backed)."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from indexer.models.archive_record import AccountAction, AccountEvent
from indexer.models.block import Block
from indexer.models.sync_cursor import SyncCursor
from indexer.models.transaction_summary import TransactionSummary
from indexer.repositories.archive_record_repository import (
    ArchiveRecordRepository,
)
from indexer.services.account_sync import AccountSyncService
from indexer.utils.exceptions import UpstreamError
from tests.factories import (
    OTHER_PUBLIC_KEY,
    PUBLIC_KEY,
    make_action,
    make_event,
)


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar()


class TestLatestPrime:
    """Tests for the latest-prime branch."""

    @pytest.mark.asyncio
    async def test_first_sync_primes_at_head(
        self, session, make_account, fake_source
    ):
        """First sync in latest mode should skip history."""
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(10, tx_hash="tx-a"), make_event(15, tx_hash="tx-b")],
            actions=[make_action(12, tx_hash="tx-c")],
        )
        account = await make_account()
        service = AccountSyncService(session, fake_source, start_mode="latest")

        result = await service.sync(account, reason="manual")

        assert result.mode == "latest-prime"
        assert result.events_ingested == 0
        assert result.actions_ingested == 0
        assert result.latest_height == 15
        assert result.cursor_height == 15
        assert result.note
        assert account.initialized is True
        assert account.cursor_height == 15
        assert account.last_sync_at is not None
        assert await count_rows(session, AccountEvent) == 0
        assert await count_rows(session, AccountAction) == 0
        assert await count_rows(session, TransactionSummary) == 0

    @pytest.mark.asyncio
    async def test_prime_on_empty_archive(
        self, session, make_account, fake_source
    ):
        """An account with no records should prime at height 0."""
        account = await make_account()
        service = AccountSyncService(session, fake_source, start_mode="latest")

        result = await service.sync(account)

        assert result.mode == "latest-prime"
        assert result.cursor_height == 0
        assert account.initialized is True

    @pytest.mark.asyncio
    async def test_second_sync_ingests_new_records_only(
        self, session, make_account, fake_source
    ):
        """After priming, only records above the head are ingested."""
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(10, tx_hash="tx-a")])
        account = await make_account()
        service = AccountSyncService(session, fake_source, start_mode="latest")
        await service.sync(account)

        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(10, tx_hash="tx-a"), make_event(11, tx_hash="tx-b")],
            actions=[make_action(12, tx_hash="tx-c")],
        )
        result = await service.sync(account, reason="interval")

        assert result.mode == "latest"
        assert result.reason == "interval"
        assert result.events_ingested == 1
        assert result.actions_ingested == 1
        assert result.cursor_height == 12
        assert account.cursor_height == 12
        tx_hashes = set(
            (await session.execute(select(TransactionSummary.tx_hash))).scalars()
        )
        assert tx_hashes == {"tx-b", "tx-c"}

    @pytest.mark.asyncio
    async def test_backfill_flag_skips_priming(
        self, session, make_account, fake_source
    ):
        """Accounts flagged for backfill should ingest history in latest mode."""
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(1, tx_hash="tx-a"), make_event(2)],
            actions=[make_action(3, tx_hash="tx-b")],
        )
        account = await make_account(backfill=True)
        service = AccountSyncService(session, fake_source, start_mode="latest")

        result = await service.sync(account)

        assert result.mode == "backfill"
        assert result.events_ingested == 2
        assert result.actions_ingested == 1
        assert result.cursor_height == 3
        assert account.initialized is True

    @pytest.mark.asyncio
    async def test_backfill_mode_ingests_history(
        self, session, make_account, fake_source
    ):
        """Backfill start mode should ingest everything on first sync."""
        fake_source.set_archive(
            PUBLIC_KEY, events=[make_event(4), make_event(5)]
        )
        account = await make_account()
        service = AccountSyncService(session, fake_source, start_mode="backfill")

        result = await service.sync(account)

        assert result.mode == "backfill"
        assert result.events_ingested == 2
        assert await count_rows(session, AccountEvent) == 2


class TestIdempotence:
    """Tests for re-running syncs."""

    @pytest.mark.asyncio
    async def test_resync_inserts_nothing(
        self, session, make_account, fake_source
    ):
        """Syncing twice with unchanged upstream should add no rows."""
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(1, tx_hash="tx-a"), make_event(2, tx_hash="tx-b")],
            actions=[make_action(2, tx_hash="tx-b")],
        )
        account = await make_account(backfill=True)
        service = AccountSyncService(session, fake_source)

        first = await service.sync(account)
        second = await service.sync(account)

        assert first.total_ingested == 3
        assert second.total_ingested == 0
        assert second.cursor_height == first.cursor_height == 2
        assert await count_rows(session, AccountEvent) == 2
        assert await count_rows(session, AccountAction) == 1
        assert await count_rows(session, TransactionSummary) == 2

    @pytest.mark.asyncio
    async def test_same_payload_for_other_account_not_reinserted(
        self, session, make_account, fake_source
    ):
        """Payload identity is global: a stored record is never stored twice."""
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(7)])
        account = await make_account(backfill=True)
        service = AccountSyncService(session, fake_source)
        await service.sync(account)

        other = await make_account(public_key=OTHER_PUBLIC_KEY, backfill=True)
        fake_source.set_archive(OTHER_PUBLIC_KEY, events=[make_event(7)])
        result = await service.sync(other)

        # Same content hash, so the second owner does not get a new row
        assert result.events_ingested == 0
        assert await count_rows(session, AccountEvent) == 1

    @pytest.mark.asyncio
    async def test_reordered_keys_are_duplicates(
        self, session, make_account, fake_source
    ):
        """A payload re-sent with different key order should not duplicate."""
        event = make_event(3, tx_hash="tx-a")
        reordered = dict(reversed(list(event.items())))
        account = await make_account(backfill=True)
        service = AccountSyncService(session, fake_source)

        fake_source.set_archive(PUBLIC_KEY, events=[event])
        await service.sync(account)
        account.cursor_height = None
        await session.commit()

        fake_source.set_archive(PUBLIC_KEY, events=[reordered])
        result = await service.sync(account)

        assert result.events_ingested == 0
        assert await count_rows(session, AccountEvent) == 1


class TestCursor:
    """Tests for cursor monotonicity and progress markers."""

    @pytest.mark.asyncio
    async def test_cursor_never_regresses(
        self, session, make_account, fake_source
    ):
        """A shorter upstream view should not move the cursor back."""
        account = await make_account(initialized=True, cursor_height=50)
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(20)])
        service = AccountSyncService(session, fake_source)

        result = await service.sync(account)

        assert result.events_ingested == 0
        assert result.latest_height == 20
        assert result.cursor_height == 50
        assert account.cursor_height == 50

    @pytest.mark.asyncio
    async def test_records_at_cursor_are_skipped(
        self, session, make_account, fake_source
    ):
        """Only records strictly above the cursor are ingested."""
        account = await make_account(initialized=True, cursor_height=5)
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(4), make_event(5), make_event(6)],
        )
        service = AccountSyncService(session, fake_source)

        result = await service.sync(account)

        assert result.events_ingested == 1
        heights = list(
            (await session.execute(select(AccountEvent.block_height))).scalars()
        )
        assert heights == [6]

    @pytest.mark.asyncio
    async def test_progress_marker_per_account(
        self, session, make_account, fake_source
    ):
        """Each account should keep its own progress marker."""
        first = await make_account(backfill=True)
        second = await make_account(
            public_key=OTHER_PUBLIC_KEY, token_id="wTok", backfill=True
        )
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(9)])
        fake_source.set_archive(
            OTHER_PUBLIC_KEY, events=[make_event(4)], token_id="wTok"
        )
        service = AccountSyncService(session, fake_source)

        await service.sync(first)
        await service.sync(second)

        markers = {
            row.source: row
            for row in (await session.execute(select(SyncCursor))).scalars()
        }
        assert markers[f"account:{PUBLIC_KEY}:"].last_height == 9
        assert markers[f"account:{PUBLIC_KEY}:"].last_state_hash == "state-9"
        assert markers[f"account:{OTHER_PUBLIC_KEY}:wTok"].last_height == 4

    @pytest.mark.asyncio
    async def test_blocks_recorded_once(
        self, session, make_account, fake_source
    ):
        """Block headers should be stored once per state hash."""
        account = await make_account(backfill=True)
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(3, data=["a"]), make_event(3, data=["b"])],
            actions=[make_action(3)],
        )

        await AccountSyncService(session, fake_source).sync(account)

        assert await count_rows(session, Block) == 1


class TestTransactionMerge:
    """Tests for transaction summary merging."""

    @pytest.mark.asyncio
    async def test_event_then_action_merge(
        self, session, make_account, fake_source
    ):
        """Fields missing on one sighting should be filled by another."""
        account = await make_account(backfill=True)
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(5, tx_hash="tx-m", memo=None, sequence_no=None)],
            actions=[make_action(7, tx_hash="tx-m", memo="hello", sequence_no=0)],
        )

        await AccountSyncService(session, fake_source).sync(account)

        tx = (
            await session.execute(
                select(TransactionSummary).where(TransactionSummary.tx_hash == "tx-m")
            )
        ).scalar_one()
        assert tx.memo == "hello"
        assert tx.sequence_no == 0
        assert tx.block_height == 7
        assert tx.tx_kind == "zkapp_action"

    @pytest.mark.asyncio
    async def test_merge_keeps_known_fields(
        self, session, make_account, fake_source
    ):
        """A later sighting without memo should not erase the stored memo."""
        account = await make_account(backfill=True)
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(9, tx_hash="tx-m", memo="kept", status="applied")],
            actions=[make_action(4, tx_hash="tx-m", memo=None, status=None)],
        )

        await AccountSyncService(session, fake_source).sync(account)

        tx = (
            await session.execute(
                select(TransactionSummary).where(TransactionSummary.tx_hash == "tx-m")
            )
        ).scalar_one()
        assert tx.memo == "kept"
        assert tx.status == "applied"
        assert tx.block_height == 9

    @pytest.mark.asyncio
    async def test_records_without_hash_skip_summary(
        self, session, make_account, fake_source
    ):
        """Raw rows without a tx hash should not create summaries."""
        account = await make_account(backfill=True)
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(2, tx_hash=None)])

        result = await AccountSyncService(session, fake_source).sync(account)

        assert result.events_ingested == 1
        assert await count_rows(session, TransactionSummary) == 0


class TestFailures:
    """Tests for failure atomicity."""

    @pytest.mark.asyncio
    async def test_upstream_failure_writes_nothing(
        self, session, make_account, fake_source
    ):
        """A failed fetch should leave the account untouched."""
        account = await make_account(backfill=True)
        fake_source.error = UpstreamError("sequencer down")

        with pytest.raises(UpstreamError):
            await AccountSyncService(session, fake_source).sync(account)

        assert account.initialized is False
        assert account.cursor_height is None
        assert await count_rows(session, SyncCursor) == 0

    @pytest.mark.asyncio
    async def test_insert_failure_rolls_back_everything(
        self, session, make_account, fake_source, monkeypatch
    ):
        """A failure mid-ingest should roll back rows and cursor together."""
        account = await make_account(backfill=True)
        account_id = account.id
        fake_source.set_archive(
            PUBLIC_KEY,
            events=[make_event(h, tx_hash=f"tx-{h}") for h in (1, 2, 3, 4, 5)],
        )

        original = ArchiveRecordRepository.insert_event
        calls = {"n": 0}

        async def failing_insert(self, **kwargs):
            calls["n"] += 1
            if calls["n"] == 4:
                raise OperationalError("INSERT", {}, Exception("disk full"))
            return await original(self, **kwargs)

        monkeypatch.setattr(ArchiveRecordRepository, "insert_event", failing_insert)

        with pytest.raises(OperationalError):
            await AccountSyncService(session, fake_source).sync(account)

        assert await count_rows(session, AccountEvent) == 0
        assert await count_rows(session, TransactionSummary) == 0
        assert await count_rows(session, SyncCursor) == 0

        monkeypatch.setattr(ArchiveRecordRepository, "insert_event", original)
        reloaded = await session.get(type(account), account_id, populate_existing=True)
        assert reloaded.cursor_height is None
        assert reloaded.initialized is False

        result = await AccountSyncService(session, fake_source).sync(reloaded)
        assert result.events_ingested == 5
        assert result.cursor_height == 5

    @pytest.mark.asyncio
    async def test_reload_failure_after_prime_keeps_commit(
        self, session, session_maker, make_account, fake_source, monkeypatch
    ):
        """A committed prime is reported even if the refresh fails."""
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(30)])
        account = await make_account()

        async def failing_refresh(instance, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("conn reset"))

        monkeypatch.setattr(session, "refresh", failing_refresh)

        result = await AccountSyncService(
            session, fake_source, start_mode="latest"
        ).sync(account)

        assert result.mode == "latest-prime"
        assert result.cursor_height == 30
        async with session_maker() as check:
            stored = await check.get(type(account), account.id)
        assert stored.initialized is True
        assert stored.cursor_height == 30


class TestIsolation:
    """Tests for cross-account isolation."""

    @pytest.mark.asyncio
    async def test_sync_touches_only_its_account(
        self, session, make_account, fake_source
    ):
        """Syncing one account should not move another account's cursor."""
        first = await make_account(backfill=True)
        second = await make_account(
            public_key=OTHER_PUBLIC_KEY, initialized=True, cursor_height=3
        )
        fake_source.set_archive(PUBLIC_KEY, events=[make_event(40)])
        fake_source.set_archive(OTHER_PUBLIC_KEY, events=[make_event(8)])

        await AccountSyncService(session, fake_source).sync(first)
        await session.refresh(second)

        assert first.cursor_height == 40
        assert second.cursor_height == 3
        assert fake_source.calls == [
            ("https://sequencer.test/graphql", PUBLIC_KEY, None)
        ]
