"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""

from sqlalchemy.exc import SQLAlchemyError


class IndexerError(Exception):
    """Base class for indexer errors."""

    pass


class UpstreamError(IndexerError):
    """Sequencer could not be reached or answered with a failure status."""

    pass


class UpstreamResponseError(UpstreamError):
    """Sequencer answered, but the body is malformed or carries errors."""

    pass


class InvalidRequestError(IndexerError, ValueError):
    """Request-boundary input rejected before any sync attempt."""

    pass


# Exception categories based on handling strategy

# Expected per-account failures - logged without traceback, retried next sweep
SYNC_FAILURES = (
    UpstreamError,    # Timeouts, HTTP errors, malformed GraphQL responses
    SQLAlchemyError,  # Storage failures (transaction already rolled back)
)


def is_expected_sync_failure(exc: BaseException) -> bool:
    """
    Check if exception is an expected per-account sync failure.

    Args:
        exc: Exception to check

    Returns:
        True if exception belongs to SYNC_FAILURES
    """
    return isinstance(exc, SYNC_FAILURES)
