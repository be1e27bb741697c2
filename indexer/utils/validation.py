"""Request input validation utilities."""

from typing import Any
from urllib.parse import urlparse

from indexer.config.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from indexer.utils.exceptions import InvalidRequestError

_TRUE_VALUES = {"true", "1", "yes", "y"}
_FALSE_VALUES = {"false", "0", "no", "n"}


def as_nullable_string(value: Any) -> str | None:
    """
    Normalize optional string input.

    Args:
        value: Raw value (any type)

    Returns:
        Trimmed string, or None for missing/blank input
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def bool_or_default(value: Any, default: bool = False) -> bool:
    """
    Parse a loosely-typed boolean.

    Accepts real booleans and true/false, 1/0, yes/no, y/n strings.
    Anything else falls back to the default.

    Args:
        value: Raw value
        default: Fallback value

    Returns:
        Parsed boolean
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return default


def safe_sequencer_url(value: Any, fallback: str) -> str:
    """
    Validate sequencer URL, using fallback when input is blank.

    Args:
        value: Requested URL
        fallback: Default sequencer URL

    Returns:
        Normalized URL

    Raises:
        InvalidRequestError: If URL is not http(s)
    """
    raw = as_nullable_string(value) or fallback
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidRequestError(f"Invalid sequencer URL: {raw}")
    return parsed.geturl()


def parse_limit(value: Any) -> int:
    """
    Parse listing limit.

    Args:
        value: Raw limit (query string value)

    Returns:
        Limit in 1..MAX_PAGE_LIMIT, DEFAULT_PAGE_LIMIT for invalid input
    """
    if value is None or value == "":
        return DEFAULT_PAGE_LIMIT
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_LIMIT
    if parsed <= 0:
        return DEFAULT_PAGE_LIMIT
    return min(parsed, MAX_PAGE_LIMIT)
