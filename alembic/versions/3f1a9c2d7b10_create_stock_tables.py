"""create_stock_tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "stock_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(length=64), nullable=False),
        sa.Column("size", sa.String(length=32), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reorder_threshold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity >= 0", name="chk_stock_quantity_non_negative"),
        sa.CheckConstraint("reorder_threshold >= 0", name="chk_stock_threshold_non_negative"),
    )
    op.create_index("ix_stock_entries_product_id", "stock_entries", ["product_id"])

    op.create_table(
        "replenishment_notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "stock_id",
            sa.Integer(),
            sa.ForeignKey("stock_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="OPEN"),
        sa.Column("quantity_at_creation", sa.Integer(), nullable=True),
        sa.Column("threshold_at_creation", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("dismissed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('OPEN', 'DISMISSED')", name="chk_notification_status"),
    )
    op.create_index("ix_replenishment_notifications_stock_id", "replenishment_notifications", ["stock_id"])
    op.create_index("ix_replenishment_notifications_status", "replenishment_notifications", ["status"])
    # At most one OPEN notification per stock entry
    op.create_index(
        "uq_replenishment_notifications_open_stock",
        "replenishment_notifications",
        ["stock_id"],
        unique=True,
        postgresql_where=sa.text("status = 'OPEN'"),
        sqlite_where=sa.text("status = 'OPEN'"),
    )


def downgrade() -> None:
    op.drop_index("uq_replenishment_notifications_open_stock", table_name="replenishment_notifications")
    op.drop_index("ix_replenishment_notifications_status", table_name="replenishment_notifications")
    op.drop_index("ix_replenishment_notifications_stock_id", table_name="replenishment_notifications")
    op.drop_table("replenishment_notifications")
    op.drop_index("ix_stock_entries_product_id", table_name="stock_entries")
    op.drop_table("stock_entries")
