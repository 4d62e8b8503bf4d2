"""
Pytest fixtures for Retail360 backend tests.

Provides the test database, an explicit store handle, the services built on
it, and a small master shop network to work against.
"""

import pytest
from retail360 import create_app
from retail360.extensions import db
from retail360.services.hierarchy_service import HierarchyService
from retail360.services.ledger_service import LedgerService
from retail360.services.shop_service import ShopService
from retail360.services.store import ShopStore


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DEFAULT_CURRENCY': 'GHS',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    return ShopStore(db_session)


@pytest.fixture(scope='function')
def hierarchy(store):
    return HierarchyService(store)


@pytest.fixture(scope='function')
def ledger(store):
    return LedgerService(store)


@pytest.fixture(scope='function')
def shops(store):
    return ShopService(store)


@pytest.fixture(scope='function')
def owner(shops):
    """Shop owner with no master shop yet."""
    return shops.create_user("Ama Owusu", "ama@retail360.test", "0240000001", role="owner")


@pytest.fixture(scope='function')
def staff(shops):
    return shops.create_user("Kofi Mensah", "kofi@retail360.test", "0240000002", role="staff")


@pytest.fixture(scope='function')
def master_shop(shops, owner):
    """Owner's master shop."""
    return shops.create_shop(
        "Osu Mart",
        "0301000001",
        "mini-mart",
        owner_user_id=owner.id,
        set_as_master=True,
    )


@pytest.fixture(scope='function')
def make_shop(shops):
    """Factory for independent shops."""
    counter = {"n": 0}

    def _make(name=None, business_type="provision-store", **kwargs):
        counter["n"] += 1
        return shops.create_shop(
            name or f"Branch {counter['n']}",
            f"03020000{counter['n']:02d}",
            business_type,
            **kwargs,
        )

    return _make
