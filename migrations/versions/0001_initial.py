"""initial schema: organizations, users, procurement requests, purchase orders, audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()))
    return cols


def upgrade():
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_org_id", "users", ["org_id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=False)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    # purchase orders
    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("po_number", sa.String(length=64), nullable=False),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("vendor_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Pending"),
        sa.Column("payment_status", sa.String(length=32), nullable=False, server_default="Not Paid"),
        sa.Column("delivery_status", sa.String(length=32), nullable=False, server_default="Not Received"),
        sa.Column("reviewed_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
    )
    op.create_index("ix_purchase_orders_org_id", "purchase_orders", ["org_id"], unique=False)
    op.create_index("ix_purchase_orders_po_number", "purchase_orders", ["po_number"], unique=False)
    op.create_index("ix_purchase_orders_created_by_user_id", "purchase_orders", ["created_by_user_id"], unique=False)
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"], unique=False)

    op.create_table(
        "po_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("po_id", sa.Integer(), sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_po_items_po_id", "po_items", ["po_id"], unique=False)

    for table in ("payment_updates", "delivery_updates"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("po_id", sa.Integer(), sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
            sa.Column("updated_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("old_status", sa.String(length=32), nullable=True),
            sa.Column("new_status", sa.String(length=32), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            *_timestamps(updated=False),
        )
        op.create_index(f"ix_{table}_po_id", table, ["po_id"], unique=False)

    # procurement requests
    op.create_table(
        "procurement_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("request_number", sa.String(length=64), nullable=False),
        sa.Column("requested_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("overall_reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Pending Admin Review"),
        sa.Column("admin_decision", sa.String(length=16), nullable=False, server_default="Pending"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("admin_reviewed_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("admin_reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "logistics_submitted_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("logistics_submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("selected_vendor_option_id", sa.Integer(), nullable=True),
        sa.Column("po_id", sa.Integer(), sa.ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_procurement_requests_org_id", "procurement_requests", ["org_id"], unique=False)
    op.create_index("ix_procurement_requests_request_number", "procurement_requests", ["request_number"], unique=True)
    op.create_index(
        "ix_procurement_requests_requested_by_user_id", "procurement_requests", ["requested_by_user_id"], unique=False
    )
    op.create_index("ix_procurement_requests_status", "procurement_requests", ["status"], unique=False)
    op.create_index("ix_procurement_requests_po_id", "procurement_requests", ["po_id"], unique=False)

    op.create_table(
        "procurement_request_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "request_id", sa.Integer(), sa.ForeignKey("procurement_requests.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("justification", sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_procurement_request_items_request_id", "procurement_request_items", ["request_id"], unique=False
    )

    op.create_table(
        "procurement_vendor_options",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "request_id", sa.Integer(), sa.ForeignKey("procurement_requests.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("vendor_name", sa.String(length=255), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("submitted_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_procurement_vendor_options_request_id", "procurement_vendor_options", ["request_id"], unique=False
    )

    op.create_table(
        "procurement_vendor_option_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "vendor_option_id",
            sa.Integer(),
            sa.ForeignKey("procurement_vendor_options.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "request_item_id",
            sa.Integer(),
            sa.ForeignKey("procurement_request_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index(
        "ix_procurement_vendor_option_items_vendor_option_id",
        "procurement_vendor_option_items",
        ["vendor_option_id"],
        unique=False,
    )
    op.create_index(
        "ix_procurement_vendor_option_items_request_item_id",
        "procurement_vendor_option_items",
        ["request_item_id"],
        unique=False,
    )

    # audit trail
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_audit_logs_org_id", "audit_logs", ["org_id"], unique=False)
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)


def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("procurement_vendor_option_items")
    op.drop_table("procurement_vendor_options")
    op.drop_table("procurement_request_items")
    op.drop_table("procurement_requests")
    op.drop_table("delivery_updates")
    op.drop_table("payment_updates")
    op.drop_table("po_items")
    op.drop_table("purchase_orders")
    op.drop_table("users")
    op.drop_table("organizations")
