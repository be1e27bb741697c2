"""
Indexer constants.

Record kinds, sync modes and listing limits shared across the application.
"""

# =============================================================================
# SYNC MODES
# =============================================================================

START_MODE_LATEST = "latest"
START_MODE_BACKFILL = "backfill"
START_MODES = (START_MODE_LATEST, START_MODE_BACKFILL)

# Mode reported when an uninitialized account is primed at the current head
SYNC_MODE_LATEST_PRIME = "latest-prime"


# =============================================================================
# RECORD KINDS
# =============================================================================

TX_KIND_EVENT = "zkapp_event"
TX_KIND_ACTION = "zkapp_action"


# =============================================================================
# SCHEDULING
# =============================================================================

# Sweeps never run more often than this, whatever INGEST_INTERVAL_SEC says
MIN_INGEST_INTERVAL_SEC = 5


# =============================================================================
# LISTING LIMITS
# =============================================================================

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500
TRACKED_ACCOUNTS_LIMIT = 500
