"""
Repositories.

Data access layer over the indexer models.
"""

from indexer.repositories.archive_record_repository import ArchiveRecordRepository
from indexer.repositories.block_repository import BlockRepository
from indexer.repositories.sync_cursor_repository import SyncCursorRepository
from indexer.repositories.tracked_account_repository import TrackedAccountRepository
from indexer.repositories.transaction_summary_repository import (
    TransactionSummaryRepository,
)

__all__ = [
    "ArchiveRecordRepository",
    "BlockRepository",
    "SyncCursorRepository",
    "TrackedAccountRepository",
    "TransactionSummaryRepository",
]
