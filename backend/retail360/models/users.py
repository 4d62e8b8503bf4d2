from __future__ import annotations

from ..extensions import db
from retail360.time_utils import isoformat_utc


USER_ROLES = ("owner", "manager", "staff")


class User(db.Model):
    """
    Shop owner or staff member.

    total_owed_cents mirrors the sum of the user's UserShopDebt rows. It is
    written only by the ledger after a debt change and is never an input.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.UniqueConstraint("phone", name="uq_users_phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(32), nullable=False)

    # owner, manager, staff
    role = db.Column(db.String(16), nullable=False, default="owner")

    master_shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True, index=True)

    total_owed_cents = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "master_shop_id": self.master_shop_id,
            "total_owed_cents": self.total_owed_cents,
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": isoformat_utc(self.created_at),
        }


class UserOwnedShop(db.Model):
    """Ownership link; at most one row per user carries is_master."""
    __tablename__ = "user_owned_shops"
    __table_args__ = (
        db.UniqueConstraint("user_id", "shop_id", name="uq_user_owned_shops_user_shop"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    is_master = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shop_id": self.shop_id,
            "is_master": self.is_master,
            "is_active": self.is_active,
            "created_at": isoformat_utc(self.created_at),
        }


class UserShopDebt(db.Model):
    __tablename__ = "user_shop_debts"
    __table_args__ = (
        db.UniqueConstraint("user_id", "shop_id", name="uq_user_shop_debts_user_shop"),
        db.CheckConstraint("amount_owed_cents >= 0", name="ck_user_shop_debts_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    amount_owed_cents = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "shop_id": self.shop_id,
            "amount_owed_cents": self.amount_owed_cents,
            "last_updated": isoformat_utc(self.last_updated),
        }
