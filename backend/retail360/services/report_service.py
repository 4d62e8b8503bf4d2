# Overview: Consolidated financial report across a user's master shop network.

from __future__ import annotations

from ..models import Shop
from ..time_utils import isoformat_utc, utcnow
from .hierarchy_service import HierarchyService
from .ledger_service import LedgerService
from .store import ShopStore


def _shop_row(shop: Shop, user_debt_cents: int, consolidated: bool) -> dict:
    revenue = shop.total_revenue_cents or 0
    expenses = shop.total_expenses_cents or 0
    return {
        "shop_id": shop.id,
        "name": shop.name,
        "shop_level": shop.shop_level,
        "total_revenue_cents": revenue,
        "total_expenses_cents": expenses,
        "net_cents": revenue - expenses,
        "total_debt_cents": shop.total_debt_cents or 0,
        "user_debt_cents": user_debt_cents,
        "consolidated": consolidated,
    }


def consolidated_financial_report(store: ShopStore, user_id: int) -> dict:
    """
    Financial summary over every shop in a user's network.

    With a master shop, the master and each connection with
    consolidate_reports count toward the totals; other active connections
    are listed but excluded. Without a master, every owned shop counts.
    """
    hierarchy = HierarchyService(store)
    ledger = LedgerService(store)

    user = store.get_user(user_id)
    master = hierarchy.get_master_shop(user_id)

    consolidated_ids: set[int]
    if master is not None:
        shops = hierarchy.resolve_network(user_id)
        consolidated_ids = {master.id}
        for connection in store.connections_for(master.id, active_only=True):
            if connection.consolidate_reports:
                consolidated_ids.add(connection.child_shop_id)
    else:
        shops = [store.get_shop(owned.shop_id) for owned in store.owned_shops_for(user.id) if owned.is_active]
        consolidated_ids = {shop.id for shop in shops}

    rows = [
        _shop_row(shop, ledger.get_debt(user.id, shop.id), shop.id in consolidated_ids)
        for shop in shops
    ]
    included = [row for row in rows if row["consolidated"]]

    totals = {
        "total_revenue_cents": sum(row["total_revenue_cents"] for row in included),
        "total_expenses_cents": sum(row["total_expenses_cents"] for row in included),
        "total_debt_cents": sum(row["total_debt_cents"] for row in included),
    }
    totals["net_cents"] = totals["total_revenue_cents"] - totals["total_expenses_cents"]

    network_revenue = None
    if master is not None:
        network_revenue = ledger.network_revenue(master.id)

    return {
        "user_id": user.id,
        "master_shop_id": master.id if master is not None else None,
        "shops": rows,
        "totals": totals,
        "network_revenue_cents": network_revenue,
        "user_total_owed_cents": ledger.get_total_debt(user.id),
        "generated_at": isoformat_utc(utcnow()),
    }
