from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer master data, scoped to a store.

    customer_number is allocated from the store's StoreCounter and is
    unique within the store. Customers are soft-deleted (is_archived);
    a customer referenced by any sale transaction can never be hard-deleted.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("store_id", "customer_number", name="uq_customers_store_number"),
        db.Index("ix_customers_store_archived", "store_id", "is_archived"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    customer_number = db.Column(db.String(32), nullable=False)
    mobile_number = db.Column(db.String(32), nullable=True)
    country_code = db.Column(db.String(8), nullable=True, default="+234")
    address = db.Column(db.String(255), nullable=False, default="")

    is_archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    store = db.relationship("Store", backref=db.backref("customers", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "customer_number": self.customer_number,
            "mobile_number": self.mobile_number,
            "country_code": self.country_code,
            "address": self.address,
            "is_archived": self.is_archived,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
