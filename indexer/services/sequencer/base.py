"""
Archive source interface.

The sync engine depends only on this seam, so the full-snapshot fetch can
later be replaced by a true incremental query without touching the
merge/cursor logic.
"""

from abc import ABC, abstractmethod

from indexer.services.sequencer.records import AccountArchive


class ArchiveSource(ABC):
    """Provider of per-account event/action archives."""

    @abstractmethod
    async def fetch_account_archive(
        self,
        sequencer_url: str,
        public_key: str,
        token_id: str | None,
    ) -> AccountArchive:
        """
        Fetch every visible event and action for an account.

        Args:
            sequencer_url: GraphQL endpoint to query
            public_key: Account address
            token_id: Token identity (None = default token)

        Returns:
            Full account archive snapshot

        Raises:
            UpstreamError: On transport failure or malformed response
        """

    async def close(self) -> None:
        """Release resources held by the source."""
        return None
