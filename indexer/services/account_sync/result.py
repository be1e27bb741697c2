"""
Sync result.
"""

from dataclasses import dataclass


@dataclass
class SyncResult:
    """Outcome of one account sync."""

    mode: str
    reason: str
    events_ingested: int
    actions_ingested: int
    latest_height: int
    cursor_height: int
    note: str | None = None

    @property
    def total_ingested(self) -> int:
        """Newly inserted raw rows."""
        return self.events_ingested + self.actions_ingested

    def to_dict(self) -> dict:
        """Serialize in the HTTP API shape."""
        data = {
            "mode": self.mode,
            "reason": self.reason,
            "ingested": {
                "events": self.events_ingested,
                "actions": self.actions_ingested,
            },
            "latestHeight": self.latest_height,
            "cursorHeight": self.cursor_height,
        }
        if self.note:
            data["note"] = self.note
        return data
