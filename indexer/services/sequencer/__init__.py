"""
Sequencer archive source.

Fetches per-account zkApp events and actions from the rollup sequencer
and parses them into typed records.
"""

from .base import ArchiveSource
from .client import SequencerGraphQLClient
from .records import (
    AccountArchive,
    ArchiveAction,
    ArchiveEvent,
    ArchiveRecord,
    BlockInfo,
    TransactionInfo,
)

__all__ = [
    "ArchiveSource",
    "SequencerGraphQLClient",
    "AccountArchive",
    "ArchiveAction",
    "ArchiveEvent",
    "ArchiveRecord",
    "BlockInfo",
    "TransactionInfo",
]
