"""
HTTP error middleware.

Maps exception categories to JSON error responses.
"""

from aiohttp import web
from loguru import logger

from indexer.utils.exceptions import InvalidRequestError, UpstreamError


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """
    Convert raised exceptions into JSON errors.

    InvalidRequestError -> 400, UpstreamError -> 502, anything else -> 500.
    aiohttp HTTP exceptions (404, 405) pass through as JSON.
    """
    try:
        return await handler(request)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return web.json_response({"error": e.reason}, status=e.status)
    except InvalidRequestError as e:
        return web.json_response({"error": str(e)}, status=400)
    except UpstreamError as e:
        logger.error(f"[API] Upstream failure on {request.path}: {e}")
        return web.json_response(
            {"error": "Upstream sequencer error", "details": str(e)},
            status=502,
        )
    except Exception as e:
        logger.exception(f"[API] Unhandled error on {request.path}: {e}")
        return web.json_response(
            {"error": "Internal error", "details": str(e)},
            status=500,
        )
