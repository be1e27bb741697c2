"""Integration tests for the sequencer GraphQL client."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from indexer.services.sequencer import SequencerGraphQLClient
from indexer.utils.exceptions import UpstreamError, UpstreamResponseError
from tests.factories import PUBLIC_KEY, make_action, make_event

pytestmark = pytest.mark.integration


class FakeSequencer:
    """Minimal GraphQL endpoint answering events/actions queries."""

    def __init__(self) -> None:
        self.events = [make_event(5, tx_hash="tx-e")]
        self.actions = [make_action(9, tx_hash="tx-a")]
        self.requests: list[dict] = []
        self.status = 200
        self.errors: list | None = None
        self.raw_body: str | None = None
        self.delay = 0.0
        self.actions_delay = 0.0
        self.events_errors: list | None = None

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.requests.append(body)
        if self.delay:
            await asyncio.sleep(self.delay)
        if "events(" in body["query"] and self.events_errors is not None:
            return web.json_response({"errors": self.events_errors})
        if "actions(" in body["query"] and self.actions_delay:
            await asyncio.sleep(self.actions_delay)
        if self.raw_body is not None:
            return web.Response(text=self.raw_body, status=self.status)
        if self.errors is not None:
            return web.json_response({"errors": self.errors}, status=self.status)
        if "events(" in body["query"]:
            data = {"events": self.events}
        else:
            data = {"actions": self.actions}
        return web.json_response({"data": data}, status=self.status)


@pytest_asyncio.fixture
async def sequencer():
    """Running fake sequencer and its GraphQL URL."""
    fake = FakeSequencer()
    app = web.Application()
    app.router.add_post("/graphql", fake.handle)
    server = TestServer(app)
    await server.start_server()
    yield fake, str(server.make_url("/graphql"))
    await server.close()


class TestSequencerGraphQLClient:
    """Tests for fetching account archives."""

    @pytest.mark.asyncio
    async def test_fetch_account_archive(self, sequencer):
        """Events and actions should be fetched and parsed."""
        fake, url = sequencer

        async with SequencerGraphQLClient(timeout_sec=5) as client:
            archive = await client.fetch_account_archive(url, PUBLIC_KEY, "wTok")

        assert [e.tx_hash for e in archive.events] == ["tx-e"]
        assert [a.tx_hash for a in archive.actions] == ["tx-a"]
        assert archive.latest_height == 9
        assert len(fake.requests) == 2
        for request in fake.requests:
            assert request["variables"]["input"]["address"] == PUBLIC_KEY
            assert request["variables"]["input"]["tokenId"] == "wTok"

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self, sequencer):
        """A body with errors should be an upstream response error."""
        fake, url = sequencer
        fake.errors = [{"message": "account not found"}]

        async with SequencerGraphQLClient(timeout_sec=5) as client:
            with pytest.raises(UpstreamResponseError, match="account not found"):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

    @pytest.mark.asyncio
    async def test_failed_query_cancels_sibling(self, sequencer):
        """A failing events query should cancel the pending actions query."""
        fake, url = sequencer
        fake.events_errors = [{"message": "events unavailable"}]
        fake.actions_delay = 1.0

        async with SequencerGraphQLClient(timeout_sec=10) as client:
            with pytest.raises(UpstreamResponseError, match="events unavailable"):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

            pending = [
                task
                for task in asyncio.all_tasks()
                if not task.done()
                and task.get_coro().__qualname__ == "SequencerGraphQLClient.query"
            ]
            assert pending == []

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self, sequencer):
        """Non-2xx responses should raise."""
        fake, url = sequencer
        fake.status = 503

        async with SequencerGraphQLClient(timeout_sec=5) as client:
            with pytest.raises(UpstreamResponseError, match="503"):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self, sequencer):
        """A non-JSON body should be an upstream response error."""
        fake, url = sequencer
        fake.raw_body = "<html>bad gateway</html>"

        async with SequencerGraphQLClient(timeout_sec=5) as client:
            with pytest.raises(UpstreamResponseError):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self, sequencer):
        """Slow responses should fail with an upstream error."""
        fake, url = sequencer
        fake.delay = 1.0

        async with SequencerGraphQLClient(timeout_sec=0.1) as client:
            with pytest.raises(UpstreamError, match="timed out"):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

    @pytest.mark.asyncio
    async def test_connection_refused(self, unused_tcp_port):
        """Unreachable sequencers should fail with an upstream error."""
        url = f"http://127.0.0.1:{unused_tcp_port}/graphql"

        async with SequencerGraphQLClient(timeout_sec=2) as client:
            with pytest.raises(UpstreamError):
                await client.fetch_account_archive(url, PUBLIC_KEY, None)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        """Closing twice should be harmless."""
        client = SequencerGraphQLClient()
        await client.close()
        await client.close()
