"""
Tracked Account model.

Registry of accounts the scheduler polls, with per-account mode flags
and the monotonic progress cursor.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from indexer.models.base import Base


class TrackedAccount(Base):
    """
    Unit of polling work.

    Identity is (public_key, token_id). A NULL token_id is its own
    identity and is never merged with any explicit token.

    cursor_height is the highest block height already ingested for this
    account. Once initialized it only moves forward.
    """

    __tablename__ = "tracked_accounts"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Identity
    public_key: Mapped[str] = mapped_column(String(128), nullable=False)
    token_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Upstream source and mode flags
    sequencer_url: Mapped[str] = mapped_column(String(512), nullable=False)
    backfill: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    initialized: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # Progress
    cursor_height: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True
    )
    last_sync_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Error tracking (scheduled sweeps)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("public_key", "token_id", name="uq_tracked_accounts_identity"),
        # NULLs are distinct in the constraint above
        Index(
            "uq_tracked_accounts_default_token",
            "public_key",
            unique=True,
            postgresql_where=text("token_id IS NULL"),
            sqlite_where=text("token_id IS NULL"),
        ),
        Index("idx_tracked_accounts_enabled", "enabled"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TrackedAccount(public_key={self.public_key[:12]}..., "
            f"token_id={self.token_id}, cursor={self.cursor_height})>"
        )

    @property
    def source_key(self) -> str:
        """Progress-marker key for this account."""
        return f"account:{self.public_key}:{self.token_id or ''}"

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "public_key": self.public_key,
            "token_id": self.token_id,
            "sequencer_url": self.sequencer_url,
            "backfill": self.backfill,
            "enabled": self.enabled,
            "initialized": self.initialized,
            "cursor_height": self.cursor_height,
            "last_sync_at": (
                self.last_sync_at.isoformat() if self.last_sync_at else None
            ),
            "last_error": self.last_error,
            "error_count": self.error_count,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
