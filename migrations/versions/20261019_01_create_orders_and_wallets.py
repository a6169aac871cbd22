"""create orders and wallet address tables

Revision ID: 5f3c2a9d1b7e
Revises: 
Create Date: 2026-10-19 12:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5f3c2a9d1b7e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("trade_id", sa.String(length=32), nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=False),
        sa.Column("requested_amount_units", sa.BigInteger(), nullable=False),
        sa.Column("requested_currency", sa.String(length=10), nullable=False, server_default="CNY"),
        sa.Column("settlement_units", sa.BigInteger(), nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("notify_url", sa.String(length=255), nullable=False),
        sa.Column("redirect_url", sa.String(length=255)),
        sa.Column("ledger_tx_id", sa.String(length=128)),
        sa.Column("callback_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_orders_trade_id", "orders", ["trade_id"], unique=True)
    op.create_index("ix_orders_order_id", "orders", ["order_id"], unique=True)
    op.create_index("ix_orders_wallet_address", "orders", ["wallet_address"])
    op.create_index(
        "uq_orders_pending_slot",
        "orders",
        ["wallet_address", "settlement_units"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "wallet_addresses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("address", sa.String(length=64), nullable=False, unique=True),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    op.drop_table("wallet_addresses")
    op.drop_index("uq_orders_pending_slot", table_name="orders")
    op.drop_index("ix_orders_wallet_address", table_name="orders")
    op.drop_index("ix_orders_order_id", table_name="orders")
    op.drop_index("ix_orders_trade_id", table_name="orders")
    op.drop_table("orders")
