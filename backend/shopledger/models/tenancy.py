from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

class Business(db.Model):
    """
    Multi-tenant root: every tenant is a Business.

    All stores belong to exactly one business; customers, staff and
    inventory are scoped one level further down, per store.
    """
    __tablename__ = "businesses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }

class Store(db.Model):
    """
    Store within a business; the unit of data isolation.

    Store.code prefixes every customer number issued by the store, so it
    may not change once customers or inventory reference the store.
    """
    __tablename__ = "stores"
    __table_args__ = (
        db.UniqueConstraint("business_id", "name", name="uq_stores_business_name"),
        db.UniqueConstraint("business_id", "code", name="uq_stores_business_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(10), nullable=False, index=True)
    address = db.Column(db.String(255), nullable=True)
    currency = db.Column(db.String(3), nullable=False, default="NGN")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    business = db.relationship("Business", backref=db.backref("stores", lazy=True))

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Store id={self.id} code={self.code!r} business_id={self.business_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "code": self.code,
            "address": self.address,
            "currency": self.currency,
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
        }

class StoreCounter(db.Model):
    """
    Atomic per-store customer number sequence.

    Only ever advanced with a single UPDATE ... SET n = n + 1 statement;
    see services/sequence_service.py.
    """
    __tablename__ = "store_counters"
    __table_args__ = (
        db.UniqueConstraint("store_id", name="uq_store_counters_store"),
        db.CheckConstraint("next_customer_number >= 1", name="ck_store_counters_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False)
    next_customer_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    store = db.relationship("Store", backref=db.backref("counter", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "next_customer_number": self.next_customer_number,
            "updated_at": to_utc_z(self.updated_at),
        }
