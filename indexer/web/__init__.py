"""Explorer HTTP API (aiohttp.web)."""
