"""
Transaction Summary model.

Denormalized view of a transaction, merged from every event and action
sighting that carries its hash.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from indexer.models.base import Base, PayloadType


class TransactionSummary(Base):
    """
    One row per transaction hash.

    Merge rule on every sighting: each field takes the new value when it is
    present and keeps the stored one otherwise; block_height takes the
    maximum of old and new.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    tx_hash: Mapped[str] = mapped_column(
        String(128), nullable=False, unique=True
    )
    tx_kind: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    sequence_no: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    block_height: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True, index=True
    )

    # Owning account
    public_key: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    token_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Last payload seen for this transaction
    payload_json: Mapped[dict[str, Any] | None] = mapped_column(
        PayloadType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TransactionSummary(tx_hash={self.tx_hash[:16]}..., "
            f"kind={self.tx_kind}, height={self.block_height})>"
        )

    def to_dict(self, include_payload: bool = True) -> dict:
        """Serialize for API responses."""
        data = {
            "tx_hash": self.tx_hash,
            "tx_kind": self.tx_kind,
            "status": self.status,
            "memo": self.memo,
            "sequence_no": self.sequence_no,
            "block_height": self.block_height,
            "public_key": self.public_key,
            "token_id": self.token_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_payload:
            data["payload_json"] = self.payload_json
        return data
