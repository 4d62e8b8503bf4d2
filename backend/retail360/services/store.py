# Overview: Persistence handle for shops, users and cross-shop transactions.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import CrossShopTransaction, Shop, ShopConnection, User, UserOwnedShop, UserShopDebt
from .errors import NotFoundError


def lock_for_update(query):
    """
    Apply row-level locking for loads that precede a mutation.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


class ShopStore:
    """
    Explicit store handle passed into every service.

    Wraps one SQLAlchemy session. Shop and User rows carry a version_id, so a
    concurrent write to the same row surfaces as StaleDataError on save().
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _load(self, model, record_id, label: str, for_update: bool):
        query = self.session.query(model).filter_by(id=record_id)
        if for_update:
            query = lock_for_update(query)
        record = query.first()
        if record is None:
            raise NotFoundError(f"{label} {record_id} not found")
        return record

    def get_shop(self, shop_id: int, *, for_update: bool = False) -> Shop:
        return self._load(Shop, shop_id, "Shop", for_update)

    def get_user(self, user_id: int, *, for_update: bool = False) -> User:
        return self._load(User, user_id, "User", for_update)

    def get_transaction(self, transaction_id: int, *, for_update: bool = False) -> CrossShopTransaction:
        return self._load(CrossShopTransaction, transaction_id, "Transaction", for_update)

    def find_connection(self, master_shop_id: int, child_shop_id: int) -> ShopConnection | None:
        return (
            self.session.query(ShopConnection)
            .filter_by(master_shop_id=master_shop_id, child_shop_id=child_shop_id)
            .first()
        )

    def connections_for(self, master_shop_id: int, *, active_only: bool = True) -> list[ShopConnection]:
        query = self.session.query(ShopConnection).filter_by(master_shop_id=master_shop_id)
        if active_only:
            query = query.filter(ShopConnection.is_active.is_(True))
        return query.order_by(ShopConnection.id.asc()).all()

    def append_connection(self, connection: ShopConnection) -> bool:
        """
        Atomically append a connection row.

        Returns False when the (master, child) pair already exists, which the
        unique constraint detects even under a concurrent insert. The session
        is rolled back in that case, so callers append before mutating
        anything else in the unit of work.
        """
        self.session.add(connection)
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def find_user_by_contact(self, email: str, phone: str) -> User | None:
        return self.session.query(User).filter((User.email == email) | (User.phone == phone)).first()

    def owned_shops_for(self, user_id: int) -> list[UserOwnedShop]:
        return (
            self.session.query(UserOwnedShop)
            .filter_by(user_id=user_id)
            .order_by(UserOwnedShop.id.asc())
            .all()
        )

    def find_owned_shop(self, user_id: int, shop_id: int) -> UserOwnedShop | None:
        return self.session.query(UserOwnedShop).filter_by(user_id=user_id, shop_id=shop_id).first()

    def find_debt(self, user_id: int, shop_id: int) -> UserShopDebt | None:
        return self.session.query(UserShopDebt).filter_by(user_id=user_id, shop_id=shop_id).first()

    def debts_for(self, user_id: int) -> list[UserShopDebt]:
        return (
            self.session.query(UserShopDebt)
            .filter_by(user_id=user_id)
            .order_by(UserShopDebt.id.asc())
            .all()
        )

    def transactions(self, *, shop_id: int | None = None, status: str | None = None) -> list[CrossShopTransaction]:
        query = self.session.query(CrossShopTransaction)
        if shop_id is not None:
            query = query.filter(
                (CrossShopTransaction.from_shop_id == shop_id)
                | (CrossShopTransaction.to_shop_id == shop_id)
            )
        if status is not None:
            query = query.filter(CrossShopTransaction.status == status)
        return query.order_by(CrossShopTransaction.id.desc()).all()

    def add(self, record) -> None:
        self.session.add(record)

    def flush(self) -> None:
        self.session.flush()

    def save(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
