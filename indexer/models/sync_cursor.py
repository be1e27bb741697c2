"""
Sync Cursor model.

Best-effort progress marker written on every successful account sync.
The authoritative per-account cursor lives on TrackedAccount.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from indexer.models.base import Base


class SyncCursor(Base):
    """
    Progress marker keyed by source.

    One row per tracked account (source = account:<public_key>:<token_id>).
    last_height never regresses.
    """

    __tablename__ = "sync_cursor"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    source: Mapped[str] = mapped_column(
        String(300), nullable=False, unique=True
    )
    last_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    last_state_hash: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<SyncCursor(source={self.source}, last_height={self.last_height})>"
