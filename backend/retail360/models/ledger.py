from __future__ import annotations

from ..extensions import db
from retail360.time_utils import isoformat_utc


TRANSACTION_TYPES = ("debt", "payment", "transfer", "loan", "revenue_share")


class CrossShopTransaction(db.Model):
    """
    Money movement intent between two shops.

    LIFECYCLE:
    1. pending: recorded, nothing applied
    2. completed: confirmed (terminal)
    3. cancelled: abandoned (terminal)

    Posting (posted_at) is a separate step on completed transactions that
    writes the per-shop InterShopEntry log. Recording never touches shop
    balances.
    """
    __tablename__ = "cross_shop_transactions"
    __table_args__ = (
        db.CheckConstraint("amount_cents >= 0", name="ck_cross_shop_transactions_amount"),
        db.Index("ix_cross_shop_transactions_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    from_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    to_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    master_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True, index=True)

    # debt, payment, transfer, loan, revenue_share
    transaction_type = db.Column(db.String(16), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    currency = db.Column(db.String(8), nullable=False, default="GHS")
    description = db.Column(db.Text, nullable=True)

    # pending, completed, cancelled
    status = db.Column(db.String(16), nullable=False, default="pending")

    # Metadata
    invoice_number = db.Column(db.String(64), nullable=True)
    reference = db.Column(db.String(128), nullable=True)
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    payment_method = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancellation_reason = db.Column(db.Text, nullable=True)
    posted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    entries = db.relationship(
        "InterShopEntry",
        backref="transaction",
        lazy=True,
        order_by="InterShopEntry.id",
    )

    def __repr__(self) -> str:
        return (
            f"<CrossShopTransaction id={self.id} {self.transaction_type} "
            f"{self.from_shop_id}->{self.to_shop_id} status={self.status}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from_shop_id": self.from_shop_id,
            "to_shop_id": self.to_shop_id,
            "user_id": self.user_id,
            "master_shop_id": self.master_shop_id,
            "transaction_type": self.transaction_type,
            "amount_cents": self.amount_cents,
            "currency": self.currency,
            "description": self.description,
            "status": self.status,
            "metadata": {
                "invoice_number": self.invoice_number,
                "reference": self.reference,
                "due_date": isoformat_utc(self.due_date),
                "payment_method": self.payment_method,
            },
            "created_at": isoformat_utc(self.created_at),
            "completed_at": isoformat_utc(self.completed_at),
            "cancelled_at": isoformat_utc(self.cancelled_at),
            "cancellation_reason": self.cancellation_reason,
            "posted_at": isoformat_utc(self.posted_at),
        }
