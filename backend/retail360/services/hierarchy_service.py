# backend/retail360/services/hierarchy_service.py
"""
Master shop hierarchy service.

WHY: A master shop is the root of a small network of connected shops
(branches, subsidiaries, partners). This service owns the parent/child graph:
designating masters, attaching and detaching children, and resolving the
network a user works in.

INVARIANTS:
- A shop with master_shop_id set has shop_level = branch.
- A master shop never has master_shop_id.
- A child appears at most once in a master's connection list.
- A child is active under at most one master: the one its master_shop_id
  points at.
- Connection order is insertion order.

Every operation is a single load/compute/persist cycle against the store
handle; nothing here retries or spawns concurrent work.
"""
from __future__ import annotations

from ..models import Shop, ShopConnection, UserOwnedShop
from ..models.shops import (
    CONNECTION_TYPES,
    SHOP_LEVEL_BRANCH,
    SHOP_LEVEL_INDEPENDENT,
    SHOP_LEVEL_MASTER,
)
from .errors import DuplicateConnectionError, NotFoundError, ValidationError
from .store import ShopStore


DEFAULT_FINANCIAL_SETTINGS = {
    "share_revenue": False,
    "consolidate_reports": True,
    "shared_inventory": False,
}


def _merge_financial_settings(financial_settings: dict | None) -> dict:
    settings = dict(DEFAULT_FINANCIAL_SETTINGS)
    for key, value in (financial_settings or {}).items():
        if key not in settings:
            raise ValidationError(f"Unknown financial setting: {key}")
        settings[key] = bool(value)
    return settings


class HierarchyService:
    def __init__(self, store: ShopStore):
        self.store = store

    def _release_from_master(self, child: Shop, new_master_id: int | None) -> None:
        """Deactivate the edge under the master the child is leaving."""
        previous_master_id = child.master_shop_id
        if previous_master_id is None or previous_master_id == new_master_id:
            return
        previous = self.store.find_connection(previous_master_id, child.id)
        if previous is not None:
            previous.is_active = False

    def designate_master(self, shop_id: int) -> Shop:
        """Make a shop the root of its own network. Idempotent."""
        shop = self.store.get_shop(shop_id, for_update=True)
        self._release_from_master(shop, None)
        shop.shop_level = SHOP_LEVEL_MASTER
        shop.master_shop_id = None
        self.store.save()
        return shop

    def connect(
        self,
        child_shop_id: int,
        master_shop_id: int,
        connection_type: str = "branch",
        financial_settings: dict | None = None,
        *,
        update_if_exists: bool = False,
        strict: bool = False,
    ) -> ShopConnection:
        """
        Attach a child shop to a master shop.

        The first connection for a (master, child) pair wins: a repeat call
        leaves the existing row untouched and returns it. Pass
        update_if_exists=True to overwrite its type and settings and
        reactivate it, or strict=True to raise DuplicateConnectionError.
        A child moving from another master has its edge there deactivated.

        Raises:
            NotFoundError: If either shop does not exist
            ValidationError: Unknown connection type or setting, or a shop
                connected to itself
            DuplicateConnectionError: strict=True and the pair exists
        """
        if connection_type not in CONNECTION_TYPES:
            raise ValidationError(f"Unknown connection type: {connection_type}")
        if child_shop_id == master_shop_id:
            raise ValidationError("Shop cannot be connected to itself")

        settings = _merge_financial_settings(financial_settings)

        self.store.get_shop(master_shop_id)
        self.store.get_shop(child_shop_id)

        connection = self.store.find_connection(master_shop_id, child_shop_id)
        if connection is None:
            candidate = ShopConnection(
                master_shop_id=master_shop_id,
                child_shop_id=child_shop_id,
                connection_type=connection_type,
                is_active=True,
                **settings,
            )
            if self.store.append_connection(candidate):
                connection = candidate
            else:
                # Lost the race to a concurrent connect; its row wins
                connection = self.store.find_connection(master_shop_id, child_shop_id)
        elif strict:
            raise DuplicateConnectionError(
                f"Shop {child_shop_id} is already connected to master shop {master_shop_id}"
            )
        elif update_if_exists:
            connection.connection_type = connection_type
            connection.is_active = True
            for key, value in settings.items():
                setattr(connection, key, value)

        child = self.store.get_shop(child_shop_id, for_update=True)
        self._release_from_master(child, master_shop_id)
        child.master_shop_id = master_shop_id
        child.shop_level = SHOP_LEVEL_BRANCH

        self.store.save()
        return connection

    def disconnect(self, child_shop_id: int, master_shop_id: int) -> ShopConnection:
        """
        Detach a child shop from a master shop.

        The connection row is deactivated, not deleted. The child becomes
        independent only if it still points at this master.
        """
        connection = self.store.find_connection(master_shop_id, child_shop_id)
        if connection is None:
            raise NotFoundError(
                f"Shop {child_shop_id} is not connected to master shop {master_shop_id}"
            )

        connection.is_active = False

        child = self.store.get_shop(child_shop_id, for_update=True)
        if child.master_shop_id == master_shop_id:
            child.master_shop_id = None
            child.shop_level = SHOP_LEVEL_INDEPENDENT

        self.store.save()
        return connection

    def list_connected_shops(self, master_shop_id: int, active_only: bool = True) -> list[ShopConnection]:
        self.store.get_shop(master_shop_id)
        return self.store.connections_for(master_shop_id, active_only=active_only)

    def resolve_network(self, user_id: int) -> list[Shop] | list[UserOwnedShop]:
        """
        Shops the user works across.

        Without a master shop this is the user's ownership rows as stored.
        With one, it is the master followed by each active connected shop in
        connection order. A dangling master reference raises NotFoundError.
        """
        user = self.store.get_user(user_id)
        if user.master_shop_id is None:
            return self.store.owned_shops_for(user.id)

        master = self.store.get_shop(user.master_shop_id)
        network = [master]
        for connection in self.store.connections_for(master.id, active_only=True):
            network.append(self.store.get_shop(connection.child_shop_id))
        return network

    def get_master_shop(self, user_id: int) -> Shop | None:
        user = self.store.get_user(user_id)
        if user.master_shop_id is None:
            return None
        return self.store.get_shop(user.master_shop_id)

    def set_user_master_shop(self, user_id: int, shop_id: int):
        """
        Point a user at a master shop and flag the matching ownership row.

        Every other ownership row loses its is_master flag, so at most one
        row is flagged and it always matches users.master_shop_id.
        """
        user = self.store.get_user(user_id, for_update=True)
        self.store.get_shop(shop_id)

        user.master_shop_id = shop_id
        for owned in self.store.owned_shops_for(user.id):
            owned.is_master = owned.shop_id == shop_id

        self.store.save()
        return user
