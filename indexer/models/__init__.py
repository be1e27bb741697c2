"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from indexer.models.archive_record import AccountAction, AccountEvent
from indexer.models.base import Base
from indexer.models.block import Block
from indexer.models.sync_cursor import SyncCursor
from indexer.models.tracked_account import TrackedAccount
from indexer.models.transaction_summary import TransactionSummary

__all__ = [
    # Base
    "Base",
    # Registry
    "TrackedAccount",
    "SyncCursor",
    # Raw archive
    "AccountEvent",
    "AccountAction",
    "Block",
    # Derived
    "TransactionSummary",
]
