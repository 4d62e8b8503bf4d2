# Overview: Pytest coverage for the Flask CLI command groups.

import json

import pytest

from retail360.models import CrossShopTransaction, Shop


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_connect_and_list(runner, db_session, master_shop, make_shop):
    branch = make_shop("Madina Branch")

    result = runner.invoke(args=[
        "shops", "connect", str(branch.id),
        "--master-id", str(master_shop.id),
        "--share-revenue",
    ])
    assert result.exit_code == 0, result.output
    assert "connected to master shop" in result.output

    result = runner.invoke(args=["shops", "connections", str(master_shop.id)])
    assert result.exit_code == 0
    assert f"shop {branch.id} (branch, active)" in result.output
    assert "share_revenue" in result.output

    db_session.expire_all()
    assert db_session.get(Shop, branch.id).shop_level == "branch"


def test_network_revenue_command(runner, ledger, master_shop):
    ledger.record_revenue(master_shop.id, 12345)

    result = runner.invoke(args=["shops", "network-revenue", str(master_shop.id)])

    assert result.exit_code == 0
    assert "123.45" in result.output


def test_set_debt_rejects_negative(runner, owner, master_shop):
    result = runner.invoke(args=["users", "set-debt", str(owner.id), str(master_shop.id), "--", "-100"])

    assert result.exit_code != 0
    assert "cannot be negative" in result.output


def test_missing_shop_reports_error(runner, db_session):
    result = runner.invoke(args=["shops", "designate-master", "99999"])

    assert result.exit_code == 1
    assert "Shop 99999 not found" in result.output


def test_transaction_lifecycle(runner, db_session, owner, master_shop, make_shop):
    branch = make_shop()

    result = runner.invoke(args=[
        "transactions", "record",
        "--from-shop", str(branch.id),
        "--to-shop", str(master_shop.id),
        "--user-id", str(owner.id),
        "--type", "loan",
        "--amount", "2500",
        "--due-date", "2026-11-01",
    ])
    assert result.exit_code == 0, result.output

    transaction = db_session.query(CrossShopTransaction).one()
    assert transaction.due_date is not None

    assert runner.invoke(args=["transactions", "complete", str(transaction.id)]).exit_code == 0
    assert runner.invoke(args=["transactions", "post", str(transaction.id)]).exit_code == 0

    result = runner.invoke(args=["transactions", "cancel", str(transaction.id)])
    assert result.exit_code == 1
    assert "from completed to cancelled" in result.output

    result = runner.invoke(args=["transactions", "list", "--status", "completed"])
    assert f"[{transaction.id}] loan" in result.output


def test_user_report_is_json(runner, owner, master_shop):
    result = runner.invoke(args=["users", "report", str(owner.id)])

    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["master_shop_id"] == master_shop.id


def test_show_commands_emit_json(runner, ledger, hierarchy, owner, master_shop, make_shop):
    branch = make_shop()
    hierarchy.connect(branch.id, master_shop.id)
    ledger.set_debt(owner.id, branch.id, 400)
    transaction = ledger.record_transaction(branch.id, master_shop.id, owner.id, "loan", 400)
    ledger.complete_transaction(transaction.id)
    ledger.post_transaction(transaction.id)

    shop = json.loads(runner.invoke(args=["shops", "show", str(master_shop.id)]).output)
    assert [c["child_shop_id"] for c in shop["connected_shops"]] == [branch.id]

    user = json.loads(runner.invoke(args=["users", "show", str(owner.id)]).output)
    assert user["total_owed_cents"] == 400
    assert [d["shop_id"] for d in user["shop_debts"]] == [branch.id]
    assert [o["shop_id"] for o in user["owned_shops"]] == [master_shop.id]

    shown = json.loads(runner.invoke(args=["transactions", "show", str(transaction.id)]).output)
    assert shown["status"] == "completed"
    assert [e["direction"] for e in shown["entries"]] == ["out", "in"]


def test_record_due_date_with_offset_is_stored_as_utc(runner, db_session, owner, master_shop, make_shop):
    branch = make_shop()
    base = [
        "transactions", "record",
        "--from-shop", str(branch.id),
        "--to-shop", str(master_shop.id),
        "--user-id", str(owner.id),
        "--type", "loan",
        "--amount", "100",
    ]

    result = runner.invoke(args=base + ["--due-date", "next week"])
    assert result.exit_code == 2
    assert "is not an ISO-8601 date" in result.output
    assert db_session.query(CrossShopTransaction).count() == 0

    result = runner.invoke(args=base + ["--due-date", "2026-11-01T12:30:00+02:00"])
    assert result.exit_code == 0, result.output

    transaction = db_session.query(CrossShopTransaction).one()
    assert transaction.to_dict()["due_date"] == "2026-11-01T10:30:00Z"
