from __future__ import annotations

from ..extensions import db
from retail360.time_utils import isoformat_utc


SHOP_LEVEL_MASTER = "master"
SHOP_LEVEL_BRANCH = "branch"
SHOP_LEVEL_INDEPENDENT = "independent"
SHOP_LEVELS = (SHOP_LEVEL_MASTER, SHOP_LEVEL_BRANCH, SHOP_LEVEL_INDEPENDENT)

CONNECTION_TYPES = ("branch", "subsidiary", "partner")

BUSINESS_TYPES = (
    "mini-mart",
    "provision-store",
    "supermarket",
    "cosmetic-shop",
    "spare-parts",
    "boutique",
    "other",
)


class Shop(db.Model):
    """
    A retail shop, optionally part of a master shop network.

    HIERARCHY:
    - master: root of a network, never has a master_shop_id
    - branch: connected under a master (master_shop_id is set)
    - independent: neither

    The children of a master are the ShopConnection rows keyed by
    master_shop_id; the child's own master_shop_id points back up.
    """
    __tablename__ = "shops"
    __table_args__ = (
        db.Index("ix_shops_master_shop_id", "master_shop_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    phone = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    business_type = db.Column(db.String(32), nullable=False, default="other")
    currency = db.Column(db.String(8), nullable=False, default="GHS")

    master_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True)
    shop_level = db.Column(db.String(16), nullable=False, default=SHOP_LEVEL_INDEPENDENT, index=True)

    # Non-negative accumulators (minor units)
    total_revenue_cents = db.Column(db.Integer, nullable=False, default=0)
    total_expenses_cents = db.Column(db.Integer, nullable=False, default=0)
    total_debt_cents = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.name!r} level={self.shop_level}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "phone": self.phone,
            "email": self.email,
            "business_type": self.business_type,
            "currency": self.currency,
            "master_shop_id": self.master_shop_id,
            "shop_level": self.shop_level,
            "financials": {
                "total_revenue_cents": self.total_revenue_cents,
                "total_expenses_cents": self.total_expenses_cents,
                "total_debt_cents": self.total_debt_cents,
            },
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": isoformat_utc(self.created_at),
            "updated_at": isoformat_utc(self.updated_at),
        }


class ShopConnection(db.Model):
    """
    One entry in a master shop's list of connected shops.

    Insertion order (id) is the connection order. A child appears at most
    once per master; deactivated rows are kept for history.
    """
    __tablename__ = "shop_connections"
    __table_args__ = (
        db.UniqueConstraint("master_shop_id", "child_shop_id", name="uq_shop_connections_master_child"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    master_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    child_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    # branch, subsidiary, partner
    connection_type = db.Column(db.String(16), nullable=False, default="branch")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    connected_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    # Financial relationship with the master
    share_revenue = db.Column(db.Boolean, nullable=False, default=False)
    consolidate_reports = db.Column(db.Boolean, nullable=False, default=True)
    shared_inventory = db.Column(db.Boolean, nullable=False, default=False)


    def financial_settings(self) -> dict:
        return {
            "share_revenue": self.share_revenue,
            "consolidate_reports": self.consolidate_reports,
            "shared_inventory": self.shared_inventory,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "master_shop_id": self.master_shop_id,
            "child_shop_id": self.child_shop_id,
            "connection_type": self.connection_type,
            "is_active": self.is_active,
            "connected_at": isoformat_utc(self.connected_at),
            "financial_settings": self.financial_settings(),
        }


class InterShopEntry(db.Model):
    """
    Per-shop log line for a posted cross-shop transaction.

    Append-only. A posted transaction writes an "out" line on the sending
    shop and an "in" line on the receiving shop.
    """
    __tablename__ = "inter_shop_entries"
    __table_args__ = (
        db.Index("ix_inter_shop_entries_shop_occurred", "shop_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    with_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False)
    transaction_id = db.Column(
        db.Integer, db.ForeignKey("cross_shop_transactions.id"), nullable=False, index=True
    )

    entry_type = db.Column(db.String(16), nullable=False)
    # in, out
    direction = db.Column(db.String(8), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())


    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "with_shop_id": self.with_shop_id,
            "transaction_id": self.transaction_id,
            "entry_type": self.entry_type,
            "direction": self.direction,
            "amount_cents": self.amount_cents,
            "description": self.description,
            "occurred_at": isoformat_utc(self.occurred_at),
        }
