# Overview: Pytest coverage for the cross-shop ledger.

"""
Cross-Shop Ledger Tests

Covers per-shop user debts and the recomputed total, network revenue, shop
accumulators, and the CrossShopTransaction lifecycle including posting.
"""

import pytest

from retail360.models import CrossShopTransaction, InterShopEntry, UserShopDebt
from retail360.services.errors import (
    InvalidAmountError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)


class TestUserDebts:

    def test_get_debt_without_entry_is_zero(self, ledger, owner, master_shop):
        assert ledger.get_debt(owner.id, master_shop.id) == 0
        assert ledger.get_total_debt(owner.id) == 0

    def test_set_debt_upserts_and_recomputes_total(self, ledger, db_session, owner, master_shop, make_shop):
        branch = make_shop()

        ledger.set_debt(owner.id, master_shop.id, 5000)
        ledger.set_debt(owner.id, branch.id, 1200)
        ledger.set_debt(owner.id, master_shop.id, 3000)

        assert ledger.get_debt(owner.id, master_shop.id) == 3000
        assert ledger.get_debt(owner.id, branch.id) == 1200
        assert ledger.get_total_debt(owner.id) == 4200
        assert db_session.query(UserShopDebt).filter_by(user_id=owner.id).count() == 2

        db_session.refresh(owner)
        assert owner.total_owed_cents == ledger.get_total_debt(owner.id)

    def test_set_debt_to_zero(self, ledger, owner, master_shop):
        ledger.set_debt(owner.id, master_shop.id, 800)
        debt = ledger.set_debt(owner.id, master_shop.id, 0)

        assert debt.amount_owed_cents == 0
        assert debt.last_updated is not None
        assert ledger.get_total_debt(owner.id) == 0

    def test_negative_debt_rejected_and_unchanged(self, ledger, db_session, owner, master_shop):
        ledger.set_debt(owner.id, master_shop.id, 700)

        with pytest.raises(InvalidAmountError):
            ledger.set_debt(owner.id, master_shop.id, -1)

        assert ledger.get_debt(owner.id, master_shop.id) == 700
        assert db_session.query(UserShopDebt).filter_by(user_id=owner.id).count() == 1

    def test_set_debt_missing_records(self, ledger, owner, master_shop):
        with pytest.raises(NotFoundError):
            ledger.set_debt(owner.id, 99999, 100)
        with pytest.raises(NotFoundError):
            ledger.set_debt(99999, master_shop.id, 100)

    def test_debts_are_per_user(self, ledger, owner, staff, master_shop):
        ledger.set_debt(owner.id, master_shop.id, 100)
        ledger.set_debt(staff.id, master_shop.id, 250)

        assert ledger.get_total_debt(owner.id) == 100
        assert ledger.get_total_debt(staff.id) == 250


class TestNetworkRevenue:

    def test_only_revenue_sharing_shops_count(self, ledger, hierarchy, master_shop, make_shop):
        sharing, private = make_shop(), make_shop()
        hierarchy.connect(sharing.id, master_shop.id, financial_settings={"share_revenue": True})
        hierarchy.connect(private.id, master_shop.id, financial_settings={"share_revenue": False})

        ledger.record_revenue(master_shop.id, 10000)
        ledger.record_revenue(sharing.id, 5000)
        ledger.record_revenue(private.id, 3000)

        assert ledger.network_revenue(master_shop.id) == 15000

    def test_inactive_sharing_shop_excluded(self, ledger, hierarchy, master_shop, make_shop):
        sharing = make_shop()
        hierarchy.connect(sharing.id, master_shop.id, financial_settings={"share_revenue": True})
        ledger.record_revenue(sharing.id, 5000)
        hierarchy.disconnect(sharing.id, master_shop.id)

        assert ledger.network_revenue(master_shop.id) == 0

    def test_reflects_current_figures(self, ledger, hierarchy, master_shop, make_shop):
        sharing = make_shop()
        hierarchy.connect(sharing.id, master_shop.id, financial_settings={"share_revenue": True})

        ledger.record_revenue(sharing.id, 100)
        assert ledger.network_revenue(master_shop.id) == 100

        ledger.record_revenue(sharing.id, 50)
        assert ledger.network_revenue(master_shop.id) == 150


class TestShopAccumulators:

    def test_revenue_and_expenses_accumulate(self, ledger, master_shop):
        ledger.record_revenue(master_shop.id, 1000)
        ledger.record_revenue(master_shop.id, 500)
        shop = ledger.record_expense(master_shop.id, 300)

        assert shop.total_revenue_cents == 1500
        assert shop.total_expenses_cents == 300

    def test_negative_amounts_rejected(self, ledger, master_shop):
        with pytest.raises(InvalidAmountError):
            ledger.record_revenue(master_shop.id, -5)
        with pytest.raises(InvalidAmountError):
            ledger.record_expense(master_shop.id, -5)
        with pytest.raises(InvalidAmountError):
            ledger.set_shop_debt(master_shop.id, -5)

    def test_set_shop_debt_replaces(self, ledger, master_shop):
        ledger.set_shop_debt(master_shop.id, 900)
        shop = ledger.set_shop_debt(master_shop.id, 400)
        assert shop.total_debt_cents == 400


@pytest.fixture
def branch(hierarchy, master_shop, make_shop):
    shop = make_shop()
    hierarchy.connect(shop.id, master_shop.id)
    return shop


class TestCrossShopTransactions:

    def test_record_creates_pending(self, ledger, owner, master_shop, branch):
        transaction = ledger.record_transaction(
            branch.id, master_shop.id, owner.id, "loan", 2000, master_shop.id,
            description="Float for weekend",
        )

        assert transaction.status == "pending"
        assert transaction.amount_cents == 2000
        assert transaction.currency == "GHS"
        assert transaction.master_shop_id == master_shop.id

    def test_record_does_not_touch_balances(self, ledger, owner, master_shop, branch):
        ledger.record_transaction(branch.id, master_shop.id, owner.id, "transfer", 2000)

        assert master_shop.total_revenue_cents == 0
        assert branch.total_revenue_cents == 0
        assert ledger.get_total_debt(owner.id) == 0

    def test_record_validation(self, ledger, owner, master_shop, branch):
        with pytest.raises(InvalidAmountError):
            ledger.record_transaction(branch.id, master_shop.id, owner.id, "loan", -1)
        with pytest.raises(ValidationError):
            ledger.record_transaction(branch.id, master_shop.id, owner.id, "gift", 10)
        with pytest.raises(NotFoundError):
            ledger.record_transaction(branch.id, 99999, owner.id, "loan", 10)
        with pytest.raises(NotFoundError):
            ledger.record_transaction(branch.id, master_shop.id, 99999, "loan", 10)
        with pytest.raises(NotFoundError):
            ledger.record_transaction(branch.id, master_shop.id, owner.id, "loan", 10, 99999)

    def test_completed_cannot_be_cancelled(self, ledger, db_session, owner, master_shop, branch):
        transaction = ledger.record_transaction(branch.id, master_shop.id, owner.id, "payment", 500)
        ledger.complete_transaction(transaction.id)

        with pytest.raises(InvalidStateTransitionError):
            ledger.cancel_transaction(transaction.id)

        db_session.expire_all()
        stored = db_session.get(CrossShopTransaction, transaction.id)
        assert stored.status == "completed"
        assert stored.cancelled_at is None

    def test_cancelled_is_terminal(self, ledger, owner, master_shop, branch):
        transaction = ledger.record_transaction(branch.id, master_shop.id, owner.id, "debt", 500)
        cancelled = ledger.cancel_transaction(transaction.id, "entered twice")

        assert cancelled.status == "cancelled"
        assert cancelled.cancellation_reason == "entered twice"
        with pytest.raises(InvalidStateTransitionError):
            ledger.complete_transaction(transaction.id)
        with pytest.raises(InvalidStateTransitionError):
            ledger.cancel_transaction(transaction.id)

    def test_missing_transaction(self, ledger, db_session):
        with pytest.raises(NotFoundError):
            ledger.complete_transaction(99999)

    def test_post_requires_completed(self, ledger, owner, master_shop, branch):
        transaction = ledger.record_transaction(branch.id, master_shop.id, owner.id, "loan", 500)

        with pytest.raises(InvalidStateTransitionError):
            ledger.post_transaction(transaction.id)

    def test_post_writes_log_once(self, ledger, db_session, owner, master_shop, branch):
        transaction = ledger.record_transaction(
            branch.id, master_shop.id, owner.id, "revenue_share", 1500, description="July share"
        )
        ledger.complete_transaction(transaction.id)

        entries = ledger.post_transaction(transaction.id)

        by_shop = {entry.shop_id: entry for entry in entries}
        assert by_shop[branch.id].direction == "out"
        assert by_shop[branch.id].with_shop_id == master_shop.id
        assert by_shop[master_shop.id].direction == "in"
        assert all(entry.amount_cents == 1500 for entry in entries)
        assert db_session.query(InterShopEntry).count() == 2
        assert transaction.posted_at is not None
        assert [entry.direction for entry in transaction.entries] == ["out", "in"]

        # Posting only logs; accumulators stay with the caller
        assert master_shop.total_revenue_cents == 0
        assert branch.total_revenue_cents == 0

        with pytest.raises(InvalidStateTransitionError):
            ledger.post_transaction(transaction.id)
        assert db_session.query(InterShopEntry).count() == 2

    def test_list_transactions_filters(self, ledger, owner, master_shop, branch, make_shop):
        outsider = make_shop()
        first = ledger.record_transaction(branch.id, master_shop.id, owner.id, "loan", 100)
        second = ledger.record_transaction(master_shop.id, branch.id, owner.id, "payment", 100)
        third = ledger.record_transaction(outsider.id, master_shop.id, owner.id, "transfer", 100)
        ledger.complete_transaction(second.id)

        assert [t.id for t in ledger.list_transactions()] == [third.id, second.id, first.id]
        assert [t.id for t in ledger.list_transactions(shop_id=branch.id)] == [second.id, first.id]
        assert [t.id for t in ledger.list_transactions(status="completed")] == [second.id]
