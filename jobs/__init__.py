"""Background jobs: sweep scheduler and health endpoints."""
