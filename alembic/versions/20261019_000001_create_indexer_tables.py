"""Create indexer tables.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

Creates the tracked account registry, raw event/action tables keyed by
payload hash, the transaction summary table, per-account progress
markers and observed block headers.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=None if nullable else sa.text("now()"),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create indexer tables."""
    op.create_table(
        "blocks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("height", sa.BigInteger(), nullable=False),
        sa.Column("state_hash", sa.String(length=128), nullable=False),
        sa.Column("parent_hash", sa.String(length=128), nullable=True),
        sa.Column("ledger_hash", sa.Text(), nullable=True),
        sa.Column("timestamp_ms", sa.BigInteger(), nullable=True),
        sa.Column("global_slot", sa.BigInteger(), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("state_hash", name="uq_blocks_state_hash"),
    )
    op.create_index("ix_blocks_height", "blocks", ["height"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tx_hash", sa.String(length=128), nullable=False),
        sa.Column("tx_kind", sa.String(length=32), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("sequence_no", sa.BigInteger(), nullable=True),
        sa.Column("block_height", sa.BigInteger(), nullable=True),
        sa.Column("public_key", sa.String(length=128), nullable=True),
        sa.Column("token_id", sa.String(length=128), nullable=True),
        sa.Column(
            "payload_json",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tx_hash", name="uq_transactions_tx_hash"),
    )
    op.create_index(
        "ix_transactions_public_key", "transactions", ["public_key"]
    )
    op.create_index(
        "ix_transactions_block_height", "transactions", ["block_height"]
    )

    for table in ("account_events", "account_actions"):
        extra = []
        if table == "account_actions":
            extra = [
                sa.Column("action_state_before", sa.Text(), nullable=True),
                sa.Column("action_state_after", sa.Text(), nullable=True),
            ]
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("tx_hash", sa.String(length=128), nullable=True),
            sa.Column("payload_hash", sa.String(length=64), nullable=False),
            sa.Column("public_key", sa.String(length=128), nullable=False),
            sa.Column("token_id", sa.String(length=128), nullable=True),
            sa.Column("block_height", sa.BigInteger(), nullable=True),
            *extra,
            sa.Column(
                "payload_json",
                postgresql.JSONB(astext_type=sa.Text()),
                nullable=False,
            ),
            _timestamp("created_at"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "payload_hash", name=f"uq_{table}_payload_hash"
            ),
        )
        op.create_index(f"ix_{table}_tx_hash", table, ["tx_hash"])
        op.create_index(f"ix_{table}_public_key", table, ["public_key"])

    op.create_table(
        "tracked_accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("public_key", sa.String(length=128), nullable=False),
        sa.Column("token_id", sa.String(length=128), nullable=True),
        sa.Column("sequencer_url", sa.String(length=512), nullable=False),
        sa.Column(
            "backfill", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column(
            "enabled", sa.Boolean(), server_default=sa.true(), nullable=False
        ),
        sa.Column(
            "initialized",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column("cursor_height", sa.BigInteger(), nullable=True),
        _timestamp("last_sync_at", nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column(
            "error_count", sa.Integer(), server_default="0", nullable=False
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "public_key", "token_id", name="uq_tracked_accounts_identity"
        ),
    )
    op.create_index(
        "idx_tracked_accounts_enabled", "tracked_accounts", ["enabled"]
    )
    op.create_index(
        "uq_tracked_accounts_default_token",
        "tracked_accounts",
        ["public_key"],
        unique=True,
        postgresql_where=sa.text("token_id IS NULL"),
        sqlite_where=sa.text("token_id IS NULL"),
    )

    op.create_table(
        "sync_cursor",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source", sa.String(length=300), nullable=False),
        sa.Column("last_height", sa.BigInteger(), nullable=True),
        sa.Column("last_state_hash", sa.Text(), nullable=True),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source", name="uq_sync_cursor_source"),
    )


def downgrade() -> None:
    """Drop indexer tables."""
    op.drop_table("sync_cursor")
    op.drop_index("idx_tracked_accounts_enabled", table_name="tracked_accounts")
    op.drop_index(
        "uq_tracked_accounts_default_token", table_name="tracked_accounts"
    )
    op.drop_table("tracked_accounts")
    for table in ("account_actions", "account_events"):
        op.drop_index(f"ix_{table}_public_key", table_name=table)
        op.drop_index(f"ix_{table}_tx_hash", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_transactions_block_height", table_name="transactions")
    op.drop_index("ix_transactions_public_key", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_blocks_height", table_name="blocks")
    op.drop_table("blocks")
