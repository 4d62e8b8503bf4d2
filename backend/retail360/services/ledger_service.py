# Overview: Service-layer operations for the cross-shop ledger; debts, revenue and inter-shop transactions.

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..models import CrossShopTransaction, InterShopEntry, UserShopDebt
from ..models.ledger import TRANSACTION_TYPES
from ..time_utils import utcnow
from .errors import InvalidAmountError, InvalidStateTransitionError, ValidationError
from .store import ShopStore
"""
Cross-Shop Ledger Invariants (authoritative)

- users.total_owed_cents == sum(user_shop_debts.amount_owed_cents), recomputed
  on every debt write and never set from input.
- Debts and accumulators are never negative.
- set_debt is last-write-wins; "add X" callers read then write.
- A CrossShopTransaction starts pending and moves once, to completed or
  cancelled. Nothing leaves a terminal state.
- Recording a transaction never changes balances. Posting a completed
  transaction writes the per-shop log and nothing else.
"""


TRANSACTION_STATUS_PENDING = "pending"
TRANSACTION_STATUS_COMPLETED = "completed"
TRANSACTION_STATUS_CANCELLED = "cancelled"


def _require_amount(amount, label: str = "Amount") -> int:
    if amount is None:
        raise InvalidAmountError(f"{label} is required")
    if amount < 0:
        raise InvalidAmountError(f"{label} cannot be negative: {amount}")
    return amount


class LedgerService:
    def __init__(self, store: ShopStore):
        self.store = store

    # ------------------------------------------------------------------
    # User debts
    # ------------------------------------------------------------------

    def get_debt(self, user_id: int, shop_id: int) -> int:
        """Amount the user owes the shop; 0 when nothing was ever recorded."""
        self.store.get_user(user_id)
        debt = self.store.find_debt(user_id, shop_id)
        return debt.amount_owed_cents if debt else 0

    def get_total_debt(self, user_id: int) -> int:
        self.store.get_user(user_id)
        return sum(debt.amount_owed_cents for debt in self.store.debts_for(user_id))

    def set_debt(self, user_id: int, shop_id: int, amount: int) -> UserShopDebt:
        """
        Upsert the user's debt to one shop and refresh the user's total.

        Raises:
            InvalidAmountError: If amount is negative (nothing is written)
            NotFoundError: If the user or shop does not exist
        """
        _require_amount(amount)

        user = self.store.get_user(user_id, for_update=True)
        self.store.get_shop(shop_id)

        debt = self.store.find_debt(user_id, shop_id)
        if debt is None:
            debt = UserShopDebt(user_id=user_id, shop_id=shop_id)
            self.store.add(debt)
        debt.amount_owed_cents = amount
        debt.last_updated = utcnow()
        self.store.flush()

        user.total_owed_cents = sum(row.amount_owed_cents for row in self.store.debts_for(user_id))

        self.store.save()
        return debt

    # ------------------------------------------------------------------
    # Shop accumulators
    # ------------------------------------------------------------------

    def record_revenue(self, shop_id: int, amount: int):
        _require_amount(amount)
        shop = self.store.get_shop(shop_id, for_update=True)
        shop.total_revenue_cents = (shop.total_revenue_cents or 0) + amount
        self.store.save()
        return shop

    def record_expense(self, shop_id: int, amount: int):
        _require_amount(amount)
        shop = self.store.get_shop(shop_id, for_update=True)
        shop.total_expenses_cents = (shop.total_expenses_cents or 0) + amount
        self.store.save()
        return shop

    def set_shop_debt(self, shop_id: int, amount: int):
        _require_amount(amount)
        shop = self.store.get_shop(shop_id, for_update=True)
        shop.total_debt_cents = amount
        self.store.save()
        return shop

    def network_revenue(self, master_shop_id: int) -> int:
        """
        Master revenue plus every active connected shop that shares revenue.

        Computed from the current per-shop figures on each call.
        """
        master = self.store.get_shop(master_shop_id)
        total = master.total_revenue_cents or 0
        for connection in self.store.connections_for(master.id, active_only=True):
            if not connection.share_revenue:
                continue
            child = self.store.get_shop(connection.child_shop_id)
            total += child.total_revenue_cents or 0
        return total

    # ------------------------------------------------------------------
    # Cross-shop transactions
    # ------------------------------------------------------------------

    def record_transaction(
        self,
        from_shop_id: int,
        to_shop_id: int,
        user_id: int,
        transaction_type: str,
        amount: int,
        master_shop_id: int | None = None,
        *,
        description: str | None = None,
        currency: str | None = None,
        invoice_number: str | None = None,
        reference: str | None = None,
        due_date: datetime | None = None,
        payment_method: str | None = None,
    ) -> CrossShopTransaction:
        """
        Record a pending cross-shop transaction.

        Balances are untouched; see post_transaction for the explicit
        follow-up step once the transaction is completed.

        Raises:
            InvalidAmountError: If amount is negative
            ValidationError: Unknown transaction type
            NotFoundError: Missing shop, user or master shop
        """
        _require_amount(amount)
        if transaction_type not in TRANSACTION_TYPES:
            raise ValidationError(f"Unknown transaction type: {transaction_type}")

        self.store.get_shop(from_shop_id)
        self.store.get_shop(to_shop_id)
        self.store.get_user(user_id)
        if master_shop_id is not None:
            self.store.get_shop(master_shop_id)

        transaction = CrossShopTransaction(
            from_shop_id=from_shop_id,
            to_shop_id=to_shop_id,
            user_id=user_id,
            master_shop_id=master_shop_id,
            transaction_type=transaction_type,
            amount_cents=amount,
            currency=currency or current_app.config.get("DEFAULT_CURRENCY", "GHS"),
            description=description,
            status=TRANSACTION_STATUS_PENDING,
            invoice_number=invoice_number,
            reference=reference,
            due_date=due_date,
            payment_method=payment_method,
        )
        self.store.add(transaction)
        self.store.save()
        return transaction

    def _require_pending(self, transaction: CrossShopTransaction, target: str) -> None:
        if transaction.status != TRANSACTION_STATUS_PENDING:
            raise InvalidStateTransitionError(
                f"Cannot move transaction {transaction.id} from {transaction.status} to {target}"
            )

    def complete_transaction(self, transaction_id: int) -> CrossShopTransaction:
        transaction = self.store.get_transaction(transaction_id, for_update=True)
        self._require_pending(transaction, TRANSACTION_STATUS_COMPLETED)

        transaction.status = TRANSACTION_STATUS_COMPLETED
        transaction.completed_at = utcnow()
        self.store.save()
        return transaction

    def cancel_transaction(self, transaction_id: int, reason: str | None = None) -> CrossShopTransaction:
        transaction = self.store.get_transaction(transaction_id, for_update=True)
        self._require_pending(transaction, TRANSACTION_STATUS_CANCELLED)

        transaction.status = TRANSACTION_STATUS_CANCELLED
        transaction.cancelled_at = utcnow()
        transaction.cancellation_reason = reason
        self.store.save()
        return transaction

    def post_transaction(self, transaction_id: int) -> list[InterShopEntry]:
        """
        Write the per-shop log lines for a completed transaction.

        An "out" line goes on the sending shop and an "in" line on the
        receiving shop. Shop accumulators are left alone; applying the
        financial effect stays with the caller.

        Raises:
            InvalidStateTransitionError: Not completed, or already posted
        """
        transaction = self.store.get_transaction(transaction_id, for_update=True)
        if transaction.status != TRANSACTION_STATUS_COMPLETED:
            raise InvalidStateTransitionError(
                f"Cannot post transaction {transaction.id} in {transaction.status} status"
            )
        if transaction.posted_at is not None:
            raise InvalidStateTransitionError(f"Transaction {transaction.id} is already posted")

        now = utcnow()
        entries = [
            InterShopEntry(
                shop_id=transaction.from_shop_id,
                with_shop_id=transaction.to_shop_id,
                transaction_id=transaction.id,
                entry_type=transaction.transaction_type,
                direction="out",
                amount_cents=transaction.amount_cents,
                description=transaction.description,
                occurred_at=now,
            ),
            InterShopEntry(
                shop_id=transaction.to_shop_id,
                with_shop_id=transaction.from_shop_id,
                transaction_id=transaction.id,
                entry_type=transaction.transaction_type,
                direction="in",
                amount_cents=transaction.amount_cents,
                description=transaction.description,
                occurred_at=now,
            ),
        ]
        for entry in entries:
            self.store.add(entry)

        transaction.posted_at = now
        self.store.save()
        return entries

    def list_transactions(
        self,
        shop_id: int | None = None,
        status: str | None = None,
    ) -> list[CrossShopTransaction]:
        if shop_id is not None:
            self.store.get_shop(shop_id)
        return self.store.transactions(shop_id=shop_id, status=status)
