"""
Explorer API routes.

Thin handlers: parse request, call a service, serialize JSON.
"""

import json
from typing import Any

from aiohttp import web

from indexer.config.constants import START_MODE_LATEST
from indexer.services.explorer_queries import ExplorerQueryService
from indexer.services.tracking_service import TrackingService
from indexer.utils.exceptions import InvalidRequestError
from indexer.utils.validation import as_nullable_string
from indexer.web.keys import (
    SESSION_MAKER_KEY,
    SOURCE_KEY,
    START_MODE_KEY,
    SWEEP_RUNNER_KEY,
)

routes = web.RouteTableDef()


async def read_json_body(request: web.Request) -> dict[str, Any]:
    """
    Read JSON object body; an empty body is an empty object.

    Raises:
        InvalidRequestError: If body is not a JSON object
    """
    raw = await request.text()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidRequestError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise InvalidRequestError("JSON body must be an object")
    return body


def _tracking_note(start_mode: str, backfill: bool) -> str:
    if start_mode == START_MODE_LATEST and not backfill:
        return "Account is tracked in progressive mode from latest cursor forward."
    return "Account is tracked with backfill enabled."


def _sync_note(start_mode: str, backfill: bool) -> str:
    if start_mode == START_MODE_LATEST and not backfill:
        return (
            "In latest mode, first sync primes cursor at current head "
            "and skips historical data."
        )
    return (
        "Backfill mode ingests historical account-scoped actions/events "
        "and can be resource intensive on large chains."
    )


@routes.get("/v2/tx/{tx_hash}")
async def get_transaction(request: web.Request) -> web.Response:
    """Look up a transaction by hash."""
    tx_hash = request.match_info["tx_hash"].strip()
    if not tx_hash:
        raise InvalidRequestError("Missing tx hash")

    async with request.app[SESSION_MAKER_KEY]() as session:
        tx = await ExplorerQueryService(session).get_transaction(tx_hash)

    if tx is None:
        return web.json_response(
            {"found": False, "txHash": tx_hash}, status=404
        )
    return web.json_response(
        {"found": True, "txHash": tx_hash, "transaction": tx}
    )


@routes.get("/v2/account/{public_key}/transactions")
async def list_account_transactions(request: web.Request) -> web.Response:
    """List an account's transactions, newest first."""
    public_key = request.match_info["public_key"].strip()
    token_id = as_nullable_string(request.query.get("tokenId"))

    async with request.app[SESSION_MAKER_KEY]() as session:
        rows = await ExplorerQueryService(session).list_account_transactions(
            public_key,
            token_id=token_id,
            limit=request.query.get("limit"),
        )

    return web.json_response(
        {
            "publicKey": public_key,
            "tokenId": token_id,
            "count": len(rows),
            "transactions": rows,
        }
    )


@routes.get("/v2/tracked/accounts")
async def list_tracked_accounts(request: web.Request) -> web.Response:
    """List tracked accounts, most recently updated first."""
    async with request.app[SESSION_MAKER_KEY]() as session:
        accounts = await TrackingService(session).list_tracked_accounts()
        rows = [account.to_dict() for account in accounts]

    return web.json_response({"count": len(rows), "accounts": rows})


@routes.post("/v2/track/account")
async def track_account(request: web.Request) -> web.Response:
    """Register an account for incremental sync."""
    body = await read_json_body(request)
    start_mode = request.app[START_MODE_KEY]

    async with request.app[SESSION_MAKER_KEY]() as session:
        service = TrackingService(session, start_mode=start_mode)
        account = await service.track_account(
            body.get("publicKey"),
            body.get("tokenId"),
            body.get("sequencerUrl"),
            body.get("backfill"),
        )
        tracked = account.to_dict()

    return web.json_response(
        {
            "ok": True,
            "tracked": tracked,
            "note": _tracking_note(start_mode, tracked["backfill"]),
        }
    )


@routes.post("/v2/sync/account")
async def sync_account(request: web.Request) -> web.Response:
    """Register an account and sync it once."""
    body = await read_json_body(request)
    start_mode = request.app[START_MODE_KEY]

    async with request.app[SESSION_MAKER_KEY]() as session:
        service = TrackingService(
            session, request.app[SOURCE_KEY], start_mode=start_mode
        )
        account, result = await service.sync_account(
            body.get("publicKey"),
            body.get("tokenId"),
            body.get("sequencerUrl"),
            body.get("backfill"),
        )
        tracked = account.to_dict()

    return web.json_response(
        {
            "ok": True,
            "publicKey": tracked["public_key"],
            "tokenId": tracked["token_id"],
            "sequencerUrl": tracked["sequencer_url"],
            "startMode": start_mode,
            "backfill": tracked["backfill"],
            "synced": result.to_dict(),
            "note": _sync_note(start_mode, tracked["backfill"]),
        }
    )


@routes.post("/v2/sweep")
async def run_sweep(request: web.Request) -> web.Response:
    """Run a sweep now, unless one is already in flight."""
    runner = request.app.get(SWEEP_RUNNER_KEY)
    if runner is None:
        raise web.HTTPServiceUnavailable(reason="Sweep runner not configured")

    report = await runner.run_sweep(reason="manual")
    if report is None:
        return web.json_response({"ok": False, "busy": True}, status=409)
    return web.json_response({"ok": True, "busy": False, **report.to_dict()})
