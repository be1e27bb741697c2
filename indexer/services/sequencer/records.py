"""
Typed sequencer archive records.

The sequencer returns loosely-typed JSON for events and actions. Records
are parsed once at the boundary into a tagged union (ArchiveEvent |
ArchiveAction) with explicit optional fields; the verbatim payload is kept
alongside for hashing and storage.
"""

from dataclasses import dataclass, field
from typing import Any

from indexer.config.constants import TX_KIND_ACTION, TX_KIND_EVENT
from indexer.utils.exceptions import UpstreamResponseError
from indexer.utils.validation import as_nullable_string


def _as_int(value: Any, field_name: str) -> int | None:
    """Parse an optional integer field (sequencer sends numbers as strings)."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise UpstreamResponseError(f"Invalid {field_name}: {value!r}")
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise UpstreamResponseError(
            f"Invalid {field_name}: {value!r}"
        ) from exc


def _as_mapping(value: Any, field_name: str) -> dict[str, Any]:
    """Return value as a dict, treating null as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UpstreamResponseError(
            f"Expected object for {field_name}, got {type(value).__name__}"
        )
    return value


@dataclass
class BlockInfo:
    """Block header attached to an event or action."""

    height: int | None = None
    state_hash: str | None = None
    parent_hash: str | None = None
    timestamp_ms: int | None = None
    global_slot: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "BlockInfo":
        """Parse blockInfo object."""
        data = _as_mapping(payload, "blockInfo")
        return cls(
            height=_as_int(data.get("height"), "blockInfo.height"),
            state_hash=as_nullable_string(data.get("stateHash")),
            parent_hash=as_nullable_string(data.get("parentHash")),
            timestamp_ms=_as_int(data.get("timestamp"), "blockInfo.timestamp"),
            global_slot=_as_int(
                data.get("globalSlotSinceGenesis"),
                "blockInfo.globalSlotSinceGenesis",
            ),
        )


@dataclass
class TransactionInfo:
    """Transaction descriptor attached to an event or action."""

    hash: str | None = None
    memo: str | None = None
    status: str | None = None
    sequence_no: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TransactionInfo":
        """Parse transactionInfo object."""
        data = _as_mapping(payload, "transactionInfo")
        return cls(
            hash=as_nullable_string(data.get("hash")),
            memo=as_nullable_string(data.get("memo")),
            status=as_nullable_string(data.get("status")),
            sequence_no=_as_int(
                data.get("sequenceNo"), "transactionInfo.sequenceNo"
            ),
        )


@dataclass
class ArchiveEvent:
    """zkApp event record."""

    block: BlockInfo
    transaction: TransactionInfo
    data: list[Any]
    payload: dict[str, Any]

    kind: str = field(default=TX_KIND_EVENT, init=False)

    @property
    def height(self) -> int:
        """Block height, 0 when the sequencer omitted it."""
        return self.block.height or 0

    @property
    def tx_hash(self) -> str | None:
        """Transaction hash, if any."""
        return self.transaction.hash

    @classmethod
    def from_payload(cls, payload: Any) -> "ArchiveEvent":
        """Parse one element of the events query."""
        record = _as_mapping(payload, "event")
        event_data = _as_mapping(record.get("eventData"), "eventData")
        return cls(
            block=BlockInfo.from_payload(record.get("blockInfo")),
            transaction=TransactionInfo.from_payload(
                record.get("transactionInfo")
            ),
            data=list(event_data.get("data") or []),
            payload=record,
        )


@dataclass
class ArchiveAction:
    """zkApp action record with its action-state transition."""

    block: BlockInfo
    transaction: TransactionInfo
    action_state_before: str | None
    action_state_after: str | None
    data: list[Any]
    payload: dict[str, Any]

    kind: str = field(default=TX_KIND_ACTION, init=False)

    @property
    def height(self) -> int:
        """Block height, 0 when the sequencer omitted it."""
        return self.block.height or 0

    @property
    def tx_hash(self) -> str | None:
        """Transaction hash, if any."""
        return self.transaction.hash

    @classmethod
    def from_payload(cls, payload: Any) -> "ArchiveAction":
        """Parse one element of the actions query."""
        record = _as_mapping(payload, "action")
        state = _as_mapping(record.get("actionState"), "actionState")
        action_data = _as_mapping(record.get("actionData"), "actionData")
        return cls(
            block=BlockInfo.from_payload(record.get("blockInfo")),
            transaction=TransactionInfo.from_payload(
                record.get("transactionInfo")
            ),
            action_state_before=as_nullable_string(state.get("actionStateOne")),
            action_state_after=as_nullable_string(state.get("actionStateTwo")),
            data=list(action_data.get("data") or []),
            payload=record,
        )


ArchiveRecord = ArchiveEvent | ArchiveAction


@dataclass
class AccountArchive:
    """Full snapshot of an account's visible events and actions."""

    events: list[ArchiveEvent] = field(default_factory=list)
    actions: list[ArchiveAction] = field(default_factory=list)

    @property
    def latest_height(self) -> int:
        """Highest block height across all records (0 if none)."""
        return max(
            (record.height for record in (*self.events, *self.actions)),
            default=0,
        )

    def latest_state_hash(self) -> str | None:
        """State hash of a block at the latest height, if known."""
        latest = self.latest_height
        for record in (*self.events, *self.actions):
            if record.height == latest and record.block.state_hash:
                return record.block.state_hash
        return None

    def records_above(
        self, cursor: int | None
    ) -> tuple[list[ArchiveEvent], list[ArchiveAction]]:
        """
        Filter records strictly above the cursor.

        Args:
            cursor: Current cursor height (None = never synced)

        Returns:
            Tuple of (events, actions) to ingest
        """
        if cursor is None:
            return list(self.events), list(self.actions)
        return (
            [e for e in self.events if e.height > cursor],
            [a for a in self.actions if a.height > cursor],
        )

    @classmethod
    def from_payload(
        cls, events: Any, actions: Any
    ) -> "AccountArchive":
        """Parse raw events/actions lists from the sequencer."""
        if events is None:
            events = []
        if actions is None:
            actions = []
        if not isinstance(events, list) or not isinstance(actions, list):
            raise UpstreamResponseError(
                "Sequencer returned non-list events/actions"
            )
        return cls(
            events=[ArchiveEvent.from_payload(e) for e in events],
            actions=[ArchiveAction.from_payload(a) for a in actions],
        )
