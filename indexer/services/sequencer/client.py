"""
Sequencer GraphQL client.

aiohttp-based ArchiveSource talking to the rollup sequencer's query API.
"""

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from indexer.config.settings import settings
from indexer.services.sequencer.base import ArchiveSource
from indexer.services.sequencer.queries import (
    ACTIONS_QUERY,
    EVENTS_QUERY,
    actions_variables,
    events_variables,
)
from indexer.services.sequencer.records import AccountArchive
from indexer.utils.exceptions import UpstreamError, UpstreamResponseError
from indexer.utils.security import mask_public_key


class SequencerGraphQLClient(ArchiveSource):
    """
    GraphQL archive source.

    One ClientSession is created lazily and reused across requests.
    Every request is bounded by a total timeout; a timeout fails the
    current account's sync and nothing else.
    """

    def __init__(self, timeout_sec: float | None = None) -> None:
        """
        Initialize client.

        Args:
            timeout_sec: Per-request timeout (default from settings)
        """
        self.timeout = aiohttp.ClientTimeout(
            total=timeout_sec or settings.upstream_timeout_sec
        )
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "SequencerGraphQLClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def query(
        self,
        sequencer_url: str,
        query: str,
        variables: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query.

        Args:
            sequencer_url: GraphQL endpoint
            query: Query document
            variables: Query variables

        Returns:
            The response's data object

        Raises:
            UpstreamError: On timeout or connection failure
            UpstreamResponseError: On non-2xx status, GraphQL errors or bad JSON
        """
        session = await self._get_session()
        try:
            async with session.post(
                sequencer_url,
                json={"query": query, "variables": variables},
                timeout=self.timeout,
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    body = None

                if response.status >= 400 or not isinstance(body, dict):
                    raise UpstreamResponseError(
                        f"GraphQL request failed ({response.status}): {body!r}"
                    )
                if body.get("errors"):
                    raise UpstreamResponseError(
                        f"GraphQL request failed ({response.status}): "
                        f"{body['errors']}"
                    )
                data = body.get("data")
                if not isinstance(data, dict):
                    raise UpstreamResponseError(
                        f"GraphQL response has no data object: {body!r}"
                    )
                return data
        except TimeoutError as e:
            raise UpstreamError(
                f"Sequencer request timed out after {self.timeout.total}s"
            ) from e
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Sequencer request failed: {e}") from e

    async def fetch_account_archive(
        self,
        sequencer_url: str,
        public_key: str,
        token_id: str | None,
    ) -> AccountArchive:
        """
        Fetch events and actions concurrently and parse them.

        If either query fails the other is cancelled and the first
        failure is raised as is.
        """
        try:
            async with asyncio.TaskGroup() as group:
                events_task = group.create_task(
                    self.query(
                        sequencer_url,
                        EVENTS_QUERY,
                        events_variables(public_key, token_id),
                    )
                )
                actions_task = group.create_task(
                    self.query(
                        sequencer_url,
                        ACTIONS_QUERY,
                        actions_variables(public_key, token_id),
                    )
                )
        except ExceptionGroup as eg:
            raise eg.exceptions[0]
        events_data = events_task.result()
        actions_data = actions_task.result()

        archive = AccountArchive.from_payload(
            events_data.get("events"), actions_data.get("actions")
        )
        logger.debug(
            f"[Sequencer] {mask_public_key(public_key)}: "
            f"{len(archive.events)} events, {len(archive.actions)} actions, "
            f"head={archive.latest_height}"
        )
        return archive
