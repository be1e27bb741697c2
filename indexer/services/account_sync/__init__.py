"""
Account Sync Service.

Incremental, idempotent ingestion of per-account zkApp events and
actions from a sequencer into the local store.

Key features:
- Content-hash idempotent raw inserts
- Monotonic per-account cursor
- Latest-prime start mode that skips history
- Row inserts and cursor advance committed together
"""

from .core import AccountSyncService
from .cursor_mixin import CursorMixin
from .hashing import canonical_json, payload_hash
from .ingestion_mixin import IngestionMixin
from .result import SyncResult

__all__ = [
    "AccountSyncService",
    "CursorMixin",
    "IngestionMixin",
    "SyncResult",
    "canonical_json",
    "payload_hash",
]
