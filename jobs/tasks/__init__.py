"""Scheduled task implementations."""
