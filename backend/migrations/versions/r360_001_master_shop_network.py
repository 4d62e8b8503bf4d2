"""master shop network schema

Revision ID: r360_001_master_shop_network
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the master shop network and cross-shop ledger schema:
- shops: hierarchy level, master reference, financial accumulators
- shop_connections: master -> child edges with financial settings
- users, user_owned_shops, user_shop_debts: ownership and per-shop debts
- cross_shop_transactions: pending/completed/cancelled money movements
- inter_shop_entries: per-shop log written when a transaction is posted
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "r360_001_master_shop_network"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "shops",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("business_type", sa.String(length=32), nullable=False, server_default="other"),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="GHS"),
        sa.Column("master_shop_id", sa.Integer(), nullable=True),
        sa.Column("shop_level", sa.String(length=16), nullable=False, server_default="independent"),
        sa.Column("total_revenue_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_expenses_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_debt_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["master_shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_shops_master_shop_id", "shops", ["master_shop_id"], unique=False)
    op.create_index("ix_shops_shop_level", "shops", ["shop_level"], unique=False)

    op.create_table(
        "shop_connections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("master_shop_id", sa.Integer(), nullable=False),
        sa.Column("child_shop_id", sa.Integer(), nullable=False),
        sa.Column("connection_type", sa.String(length=16), nullable=False, server_default="branch"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("connected_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("share_revenue", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("consolidate_reports", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("shared_inventory", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["master_shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["child_shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("master_shop_id", "child_shop_id", name="uq_shop_connections_master_child"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_shop_connections_master_shop_id", "shop_connections", ["master_shop_id"], unique=False)
    op.create_index("ix_shop_connections_child_shop_id", "shop_connections", ["child_shop_id"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="owner"),
        sa.Column("master_shop_id", sa.Integer(), nullable=True),
        sa.Column("total_owed_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["master_shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("phone", name="uq_users_phone"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)
    op.create_index("ix_users_master_shop_id", "users", ["master_shop_id"], unique=False)

    op.create_table(
        "user_owned_shops",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("is_master", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "shop_id", name="uq_user_owned_shops_user_shop"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_user_owned_shops_user_id", "user_owned_shops", ["user_id"], unique=False)
    op.create_index("ix_user_owned_shops_shop_id", "user_owned_shops", ["shop_id"], unique=False)

    op.create_table(
        "user_shop_debts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("amount_owed_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "shop_id", name="uq_user_shop_debts_user_shop"),
        sa.CheckConstraint("amount_owed_cents >= 0", name="ck_user_shop_debts_non_negative"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_user_shop_debts_user_id", "user_shop_debts", ["user_id"], unique=False)
    op.create_index("ix_user_shop_debts_shop_id", "user_shop_debts", ["shop_id"], unique=False)

    op.create_table(
        "cross_shop_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("from_shop_id", sa.Integer(), nullable=False),
        sa.Column("to_shop_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("master_shop_id", sa.Integer(), nullable=True),
        sa.Column("transaction_type", sa.String(length=16), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="GHS"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("invoice_number", sa.String(length=64), nullable=True),
        sa.Column("reference", sa.String(length=128), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_method", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["from_shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["to_shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["master_shop_id"], ["shops.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount_cents >= 0", name="ck_cross_shop_transactions_amount"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cross_shop_transactions_status", "cross_shop_transactions", ["status"], unique=False)
    op.create_index("ix_cross_shop_transactions_from_shop_id", "cross_shop_transactions", ["from_shop_id"], unique=False)
    op.create_index("ix_cross_shop_transactions_to_shop_id", "cross_shop_transactions", ["to_shop_id"], unique=False)
    op.create_index("ix_cross_shop_transactions_user_id", "cross_shop_transactions", ["user_id"], unique=False)
    op.create_index("ix_cross_shop_transactions_master_shop_id", "cross_shop_transactions", ["master_shop_id"], unique=False)

    op.create_table(
        "inter_shop_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("with_shop_id", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("entry_type", sa.String(length=16), nullable=False),
        sa.Column("direction", sa.String(length=8), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["with_shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["transaction_id"], ["cross_shop_transactions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_inter_shop_entries_shop_id", "inter_shop_entries", ["shop_id"], unique=False)
    op.create_index("ix_inter_shop_entries_transaction_id", "inter_shop_entries", ["transaction_id"], unique=False)
    op.create_index("ix_inter_shop_entries_shop_occurred", "inter_shop_entries", ["shop_id", "occurred_at"], unique=False)


def downgrade():
    op.drop_table("inter_shop_entries")
    op.drop_table("cross_shop_transactions")
    op.drop_table("user_shop_debts")
    op.drop_table("user_owned_shops")
    op.drop_table("users")
    op.drop_table("shop_connections")
    op.drop_table("shops")
