"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Stocked items table
    op.create_table(
        "stocked_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("item_class", sa.Enum("CONSUMABLE", "PACKAGING", name="itemclass"), nullable=False),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("pack_weight", sa.Numeric(12, 4), nullable=False),
        sa.Column("cumulative_packs_purchased", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cumulative_cost_spent", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("on_hand_base_units", sa.Numeric(16, 4), nullable=False, server_default="0"),
        sa.Column("low_stock_threshold", sa.Numeric(12, 4), nullable=True),
        sa.Column("low_stock_threshold_unit", sa.String(20), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("on_hand_base_units >= 0", name="ck_stocked_items_on_hand_non_negative"),
        sa.CheckConstraint("cumulative_packs_purchased >= 0", name="ck_stocked_items_packs_non_negative"),
        sa.CheckConstraint("cumulative_cost_spent >= 0", name="ck_stocked_items_cost_non_negative"),
    )

    # Stock movements table (audit trail)
    op.create_table(
        "stock_movements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ts", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column(
            "item_id",
            sa.Integer(),
            sa.ForeignKey("stocked_items.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("qty_delta", sa.Numeric(16, 4), nullable=False),
        sa.Column("cost_delta", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("reason", sa.String(50), nullable=False),
        sa.Column("ref_type", sa.String(50), nullable=True),
        sa.Column("ref_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
    )

    # Recipes table
    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("making_charge", sa.Numeric(12, 4), nullable=False, server_default="0"),
        sa.Column("total_cost_price", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Recipe lines table
    op.create_table(
        "recipe_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "recipe_id",
            sa.Integer(),
            sa.ForeignKey("recipes.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("stocked_items.id"), nullable=False, index=True),
        sa.Column("quantity_needed", sa.Numeric(12, 4), nullable=False),
        sa.Column("unit", sa.String(20), nullable=False),
    )

    # Orders table
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column(
            "status",
            sa.Enum("PENDING", "ONGOING", "COMPLETED", "CANCELLED", name="orderstatus"),
            nullable=False,
            index=True,
        ),
        sa.Column("order_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("stock_reserved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Order lines table
    op.create_table(
        "order_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("recipe_id", sa.Integer(), sa.ForeignKey("recipes.id"), nullable=False, index=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("selling_price", sa.Numeric(12, 4), nullable=False, server_default="0"),
    )

    # Order reservations table (snapshot of deducted stock)
    op.create_table(
        "order_reservations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("stocked_items.id"), nullable=False, index=True),
        sa.Column("base_units", sa.Numeric(16, 4), nullable=False),
        sa.UniqueConstraint("order_id", "item_id", name="uq_reservation_order_item"),
    )


def downgrade() -> None:
    op.drop_table("order_reservations")
    op.drop_table("order_lines")
    op.drop_table("orders")
    op.drop_table("recipe_lines")
    op.drop_table("recipes")
    op.drop_table("stock_movements")
    op.drop_table("stocked_items")
    sa.Enum(name="orderstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="itemclass").drop(op.get_bind(), checkfirst=True)
