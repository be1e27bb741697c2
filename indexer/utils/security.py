"""
Log masking helpers.
"""

from urllib.parse import urlparse


def mask_public_key(public_key: str | None) -> str:
    """
    Mask account public key for logging: B62qrP...Vx5w

    Args:
        public_key: Account public key to mask

    Returns:
        Masked key showing first 6 and last 4 characters

    Examples:
        >>> mask_public_key("B62qrPN5Y5yq8kGE3FbVKbGTdTAJNdtNtB5sNVpxyRwWGcDEhpMzc8g")
        'B62qrP...zc8g'
        >>> mask_public_key(None)
        '***'
        >>> mask_public_key("short")
        '***'
    """
    if not public_key or len(public_key) < 10:
        return "***"
    return f"{public_key[:6]}...{public_key[-4:]}"


def mask_tx_hash(tx_hash: str | None) -> str:
    """
    Mask base58 transaction hash for logging: 5JuJ7c...p8nWqV

    Args:
        tx_hash: Transaction hash

    Returns:
        First 6 and last 6 characters, or '***' for short input
    """
    if not tx_hash or len(tx_hash) < 20:
        return "***"
    return f"{tx_hash[:6]}...{tx_hash[-6:]}"


def mask_url(url: str | None) -> str:
    """
    Strip credentials and query string from a URL for logging.

    Args:
        url: Endpoint URL

    Returns:
        scheme://host[:port]/path
    """
    if not url:
        return "***"
    parsed = urlparse(url)
    host = parsed.hostname or ""
    if parsed.port:
        host = f"{host}:{parsed.port}"
    return f"{parsed.scheme}://{host}{parsed.path}"
