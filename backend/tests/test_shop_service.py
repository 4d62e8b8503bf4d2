import pytest

from retail360.models import UserOwnedShop
from retail360.services.errors import NotFoundError, ValidationError


class TestCreateUser:

    def test_create_user_normalizes_email(self, shops, db_session):
        user = shops.create_user("Esi", "  Esi@Retail360.Test ", "0249999999", role="manager")

        assert user.email == "esi@retail360.test"
        assert user.role == "manager"
        assert user.total_owed_cents == 0
        assert user.master_shop_id is None

    def test_duplicate_email_or_phone_rejected(self, shops, owner):
        with pytest.raises(ValidationError):
            shops.create_user("Other", owner.email, "0241234567")
        with pytest.raises(ValidationError):
            shops.create_user("Other", "other@retail360.test", owner.phone)

    def test_unknown_role_rejected(self, shops, db_session):
        with pytest.raises(ValidationError):
            shops.create_user("Yaw", "yaw@retail360.test", "0247777777", role="cashier")


class TestCreateShop:

    def test_create_independent_shop(self, shops, db_session):
        shop = shops.create_shop("Labadi Store", "0303000000", "boutique")

        assert shop.shop_level == "independent"
        assert shop.master_shop_id is None
        assert shop.currency == "GHS"

    def test_create_master_shop_for_owner(self, shops, db_session, owner, master_shop):
        assert master_shop.shop_level == "master"
        assert owner.master_shop_id == master_shop.id

        owned = db_session.query(UserOwnedShop).filter_by(user_id=owner.id).one()
        assert owned.shop_id == master_shop.id
        assert owned.is_master is True

    def test_master_needs_owner(self, shops, db_session):
        with pytest.raises(ValidationError):
            shops.create_shop("Orphan", "0300000000", "other", set_as_master=True)

    def test_unknown_business_type(self, shops, db_session):
        with pytest.raises(ValidationError):
            shops.create_shop("Pharmacy", "0300000000", "pharmacy")

    def test_missing_owner(self, shops, db_session):
        with pytest.raises(NotFoundError):
            shops.create_shop("Ghost", "0300000000", "other", owner_user_id=99999)


def test_add_owned_shop_is_idempotent(shops, db_session, staff, make_shop):
    shop = make_shop()

    shops.add_owned_shop(staff.id, shop.id)
    shops.add_owned_shop(staff.id, shop.id)

    assert db_session.query(UserOwnedShop).filter_by(user_id=staff.id).count() == 1


def test_add_owned_shop_as_master(shops, staff, make_shop):
    shop = make_shop()

    owned = shops.add_owned_shop(staff.id, shop.id, is_master=True)

    assert owned.is_master is True
    assert staff.master_shop_id == shop.id
