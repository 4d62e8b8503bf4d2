from __future__ import annotations

from flask import current_app

from ..models import Shop, User, UserOwnedShop
from ..models.shops import BUSINESS_TYPES
from ..models.users import USER_ROLES
from .errors import ValidationError
from .hierarchy_service import HierarchyService
from .store import ShopStore


class ShopService:
    """Creates shop and user records and the ownership links between them."""

    def __init__(self, store: ShopStore):
        self.store = store
        self.hierarchy = HierarchyService(store)

    def create_user(self, name: str, email: str, phone: str, role: str = "owner") -> User:
        if not name or not email or not phone:
            raise ValidationError("Name, email and phone are required")
        if role not in USER_ROLES:
            raise ValidationError(f"Unknown role: {role}")

        email = email.strip().lower()
        if self.store.find_user_by_contact(email, phone):
            raise ValidationError("User with this email or phone already exists")

        user = User(name=name.strip(), email=email, phone=phone, role=role)
        self.store.add(user)
        self.store.save()
        return user

    def create_shop(
        self,
        name: str,
        phone: str,
        business_type: str = "other",
        *,
        owner_user_id: int | None = None,
        set_as_master: bool = False,
        description: str | None = None,
        email: str | None = None,
        currency: str | None = None,
    ) -> Shop:
        """
        Create a shop, optionally owned by a user and made their master shop.

        set_as_master requires an owner: the shop is designated master and
        becomes the owner's master shop.
        """
        if not name or not phone:
            raise ValidationError("Shop name and phone are required")
        if business_type not in BUSINESS_TYPES:
            raise ValidationError(f"Unknown business type: {business_type}")
        if set_as_master and owner_user_id is None:
            raise ValidationError("A master shop needs an owner")

        if owner_user_id is not None:
            self.store.get_user(owner_user_id)

        shop = Shop(
            name=name.strip(),
            phone=phone,
            business_type=business_type,
            description=description,
            email=email.strip().lower() if email else None,
            currency=currency or current_app.config.get("DEFAULT_CURRENCY", "GHS"),
        )
        self.store.add(shop)
        self.store.save()

        if owner_user_id is not None:
            self.add_owned_shop(owner_user_id, shop.id, is_master=set_as_master)
        if set_as_master:
            self.hierarchy.designate_master(shop.id)

        return shop

    def add_owned_shop(self, user_id: int, shop_id: int, is_master: bool = False) -> UserOwnedShop:
        """Link a user to a shop they own. Idempotent per (user, shop)."""
        self.store.get_user(user_id)
        self.store.get_shop(shop_id)

        owned = self.store.find_owned_shop(user_id, shop_id)
        if owned is None:
            owned = UserOwnedShop(user_id=user_id, shop_id=shop_id, is_master=False, is_active=True)
            self.store.add(owned)
        else:
            owned.is_active = True
        self.store.save()

        if is_master:
            self.hierarchy.set_user_master_shop(user_id, shop_id)
        return owned
