"""
Content hashing for archive records.

The payload hash is the idempotency key for raw records. The sequencer
does not guarantee field order, so payloads are serialized canonically
(sorted keys, compact separators) before hashing.
"""

import hashlib
import json
from typing import Any


def canonical_json(payload: Any) -> str:
    """
    Serialize payload deterministically.

    Args:
        payload: Decoded JSON value (None is treated as an empty object)

    Returns:
        Canonical JSON text
    """
    return json.dumps(
        payload if payload is not None else {},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def payload_hash(payload: Any) -> str:
    """
    Fingerprint a record payload.

    Args:
        payload: Full decoded record

    Returns:
        SHA-256 hex digest (64 characters)
    """
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
