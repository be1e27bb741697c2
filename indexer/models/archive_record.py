"""
Raw archive record models.

Content-addressed storage of zkApp events and actions exactly as the
sequencer returned them. payload_hash is the de-duplication key: the same
record is re-observed on every poll, so rows are inserted once and never
mutated afterwards.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from indexer.models.base import Base, PayloadType


class AccountEvent(Base):
    """Raw zkApp event observed for a tracked account."""

    __tablename__ = "account_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    tx_hash: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    payload_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True
    )

    # Owner
    public_key: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    token_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    block_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    payload_json: Mapped[dict[str, Any]] = mapped_column(
        PayloadType, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AccountEvent(payload_hash={self.payload_hash[:12]}..., "
            f"height={self.block_height})>"
        )

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "tx_hash": self.tx_hash,
            "block_height": self.block_height,
            "public_key": self.public_key,
            "token_id": self.token_id,
            "payload_json": self.payload_json,
            "source": self.__tablename__,
        }


class AccountAction(Base):
    """Raw zkApp action observed for a tracked account."""

    __tablename__ = "account_actions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    tx_hash: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    payload_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True
    )

    # Owner
    public_key: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    token_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    block_height: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Action state pair (before/after this action)
    action_state_before: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_state_after: Mapped[str | None] = mapped_column(Text, nullable=True)

    payload_json: Mapped[dict[str, Any]] = mapped_column(
        PayloadType, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AccountAction(payload_hash={self.payload_hash[:12]}..., "
            f"height={self.block_height})>"
        )

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "tx_hash": self.tx_hash,
            "block_height": self.block_height,
            "public_key": self.public_key,
            "token_id": self.token_id,
            "action_state_before": self.action_state_before,
            "action_state_after": self.action_state_after,
            "payload_json": self.payload_json,
            "source": self.__tablename__,
        }
