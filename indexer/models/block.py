"""
Block model.

Headers of blocks referenced by ingested events and actions.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from indexer.models.base import Base


class Block(Base):
    """Block header, unique by state hash."""

    __tablename__ = "blocks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    height: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    state_hash: Mapped[str] = mapped_column(
        String(128), nullable=False, unique=True
    )
    parent_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    ledger_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    global_slot: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Block(height={self.height}, state_hash={self.state_hash[:12]}...)>"
