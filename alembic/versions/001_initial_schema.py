"""Initial schema: catalog tables, purchase requests, items and queue allocations.

Revision ID: 001
Revises: None
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Catalog tables, written by catalog management and read here
    op.create_table(
        "sales_rounds",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("window_end", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("window_start < window_end", name="check_sales_round_window"),
    )
    op.create_index("ix_sales_rounds_id", "sales_rounds", ["id"])
    op.create_index("ix_sales_rounds_event_id", "sales_rounds", ["event_id"])
    op.create_index("ix_sales_rounds_window", "sales_rounds", ["window_start", "window_end"])

    op.create_table(
        "ticket_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_ticket_types_id", "ticket_types", ["id"])
    op.create_index("ix_ticket_types_event_id", "ticket_types", ["event_id"])

    op.create_table(
        "purchase_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("customer_id", sa.String(255), nullable=False),
        sa.Column("sales_round_id", sa.Integer(), sa.ForeignKey("sales_rounds.id"), nullable=False),
        sa.Column("queue_number", sa.Integer(), nullable=True),
        *_timestamps(),
        # NULLs never collide, so unallocated requests are unaffected
        sa.UniqueConstraint("sales_round_id", "queue_number", name="uq_sales_round_queue_number"),
        sa.CheckConstraint("queue_number IS NULL OR queue_number > 0", name="check_queue_number_positive"),
    )
    op.create_index("ix_purchase_requests_id", "purchase_requests", ["id"])
    op.create_index("ix_purchase_requests_customer_id", "purchase_requests", ["customer_id"])
    # Allocation counts and reads a whole round at once
    op.create_index("ix_purchase_requests_sales_round", "purchase_requests", ["sales_round_id"])

    op.create_table(
        "purchase_request_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_request_id",
            sa.Integer(),
            sa.ForeignKey("purchase_requests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("ticket_type_id", sa.Integer(), sa.ForeignKey("ticket_types.id"), nullable=False),
        sa.Column("quantity_requested", sa.Integer(), nullable=False),
        sa.Column("quantity_approved", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.CheckConstraint("quantity_requested > 0", name="check_item_quantity_requested_positive"),
        sa.CheckConstraint("quantity_approved >= 0", name="check_item_quantity_approved_non_negative"),
    )
    op.create_index(
        "ix_purchase_request_items_purchase_request_id", "purchase_request_items", ["purchase_request_id"]
    )

    op.create_table(
        "queue_allocations",
        sa.Column("sales_round_id", sa.Integer(), sa.ForeignKey("sales_rounds.id"), primary_key=True),
        sa.Column("request_count", sa.Integer(), nullable=False),
        sa.Column("allocated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("queue_allocations")
    op.drop_table("purchase_request_items")
    op.drop_table("purchase_requests")
    op.drop_table("ticket_types")
    op.drop_table("sales_rounds")
