"""Unit tests for typed sequencer records."""

import pytest

from indexer.config.constants import TX_KIND_ACTION, TX_KIND_EVENT
from indexer.services.sequencer.records import (
    AccountArchive,
    ArchiveAction,
    ArchiveEvent,
    BlockInfo,
)
from indexer.utils.exceptions import UpstreamResponseError
from tests.factories import make_action, make_event


class TestArchiveEvent:
    """Tests for event parsing."""

    def test_parses_block_and_transaction(self):
        """Event fields should be parsed from the sequencer shape."""
        event = ArchiveEvent.from_payload(
            make_event(12, tx_hash="5Jtx", memo="hi", sequence_no=3)
        )

        assert event.kind == TX_KIND_EVENT
        assert event.height == 12
        assert event.block.state_hash == "state-12"
        assert event.block.timestamp_ms == 1700000000000
        assert event.tx_hash == "5Jtx"
        assert event.transaction.memo == "hi"
        assert event.transaction.sequence_no == 3
        assert event.data == ["1", "12"]

    def test_payload_kept_verbatim(self):
        """Original payload should be kept for hashing and storage."""
        raw = make_event(4, tx_hash="5Jtx")
        event = ArchiveEvent.from_payload(raw)
        assert event.payload is raw

    def test_missing_height_is_zero(self):
        """Records without a height should count as height 0."""
        event = ArchiveEvent.from_payload({"eventData": {"data": []}})
        assert event.height == 0
        assert event.block.height is None
        assert event.tx_hash is None

    def test_blank_hash_is_none(self):
        """Blank transaction hash should be treated as absent."""
        event = ArchiveEvent.from_payload(make_event(4, tx_hash="  "))
        assert event.tx_hash is None

    def test_non_numeric_height_rejected(self):
        """Non-numeric heights should be an upstream response error."""
        with pytest.raises(UpstreamResponseError):
            ArchiveEvent.from_payload({"blockInfo": {"height": "abc"}})

    def test_boolean_height_rejected(self):
        """Boolean heights should not be coerced to integers."""
        with pytest.raises(UpstreamResponseError):
            BlockInfo.from_payload({"height": True})

    def test_non_object_record_rejected(self):
        """A record that is not an object should be rejected."""
        with pytest.raises(UpstreamResponseError):
            ArchiveEvent.from_payload(["not", "an", "object"])


class TestArchiveAction:
    """Tests for action parsing."""

    def test_parses_action_state(self):
        """Action-state transition should be parsed."""
        action = ArchiveAction.from_payload(
            make_action(8, tx_hash="5Jact", before="11", after="22")
        )

        assert action.kind == TX_KIND_ACTION
        assert action.height == 8
        assert action.action_state_before == "11"
        assert action.action_state_after == "22"
        assert action.data == ["7", "8"]

    def test_sequence_zero_is_present(self):
        """Sequence number 0 should be kept, not treated as missing."""
        action = ArchiveAction.from_payload(make_action(8, sequence_no=0))
        assert action.transaction.sequence_no == 0


class TestAccountArchive:
    """Tests for archive snapshots."""

    def test_latest_height_spans_events_and_actions(self):
        """Latest height should be the max over both kinds."""
        archive = AccountArchive.from_payload(
            [make_event(3), make_event(9)], [make_action(12)]
        )
        assert archive.latest_height == 12
        assert archive.latest_state_hash() == "state-12"

    def test_empty_archive(self):
        """Empty (or null) lists should give height 0."""
        archive = AccountArchive.from_payload(None, None)
        assert archive.latest_height == 0
        assert archive.latest_state_hash() is None

    def test_records_above_none_returns_all(self):
        """A null cursor should select every record."""
        archive = AccountArchive.from_payload(
            [make_event(1), make_event(2)], [make_action(2)]
        )
        events, actions = archive.records_above(None)
        assert len(events) == 2
        assert len(actions) == 1

    def test_records_above_is_strict(self):
        """Records at the cursor height should be excluded."""
        archive = AccountArchive.from_payload(
            [make_event(4), make_event(5), make_event(6)],
            [make_action(5), make_action(7)],
        )
        events, actions = archive.records_above(5)
        assert [e.height for e in events] == [6]
        assert [a.height for a in actions] == [7]

    def test_non_list_rejected(self):
        """Non-list events should be an upstream response error."""
        with pytest.raises(UpstreamResponseError):
            AccountArchive.from_payload({"oops": 1}, [])
