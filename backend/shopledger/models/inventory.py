from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ITEM_TYPE_PRODUCT = "product"
ITEM_TYPE_SERVICE = "service"
ITEM_TYPES = (ITEM_TYPE_PRODUCT, ITEM_TYPE_SERVICE)


class InventoryItem(db.Model):
    """
    Sellable item of a store: a stocked product or an unlimited service.

    MONEY: prices are stored in integer cents (fixed-point); the frontend
    only formats them for display.

    STOCK:
    - quantity is only meaningful for products and can never go negative
      (CHECK constraint + conditional decrement in inventory_service).
    - Services are never decremented and bypass stock checks.
    - Checkout and restock both write this row; see services/concurrency.py
      for the shared locking discipline.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_inventory_store_name"),
        db.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        db.CheckConstraint("cost_price_cents >= 0", name="ck_inventory_cost_non_negative"),
        db.CheckConstraint("selling_price_cents >= 0", name="ck_inventory_price_non_negative"),
        db.Index("ix_inventory_store_type", "store_id", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False, default=ITEM_TYPE_PRODUCT)

    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    selling_price_cents = db.Column(db.Integer, nullable=False, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    store = db.relationship("Store", backref=db.backref("inventory_items", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_product(self) -> bool:
        return self.type == ITEM_TYPE_PRODUCT

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} name={self.name!r} type={self.type} store_id={self.store_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "name": self.name,
            "type": self.type,
            "cost_price_cents": self.cost_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "quantity": self.quantity,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RestockEvent(db.Model):
    """
    Append-only audit record of one restock.

    Captures the before/after state of the item so the cost basis history
    can be reconstructed without replaying strategies.
    """
    __tablename__ = "restock_events"
    __table_args__ = (
        db.CheckConstraint("quantity_added >= 1", name="ck_restock_quantity_positive"),
        db.CheckConstraint("unit_cost_cents >= 0", name="ck_restock_cost_non_negative"),
        db.Index("ix_restock_events_store_item", "store_id", "inventory_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity_added = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False)
    cost_strategy = db.Column(db.String(16), nullable=False)
    override_cost_cents = db.Column(db.Integer, nullable=True)

    previous_quantity = db.Column(db.Integer, nullable=False)
    new_quantity = db.Column(db.Integer, nullable=False)
    previous_cost_price_cents = db.Column(db.Integer, nullable=False)
    new_cost_price_cents = db.Column(db.Integer, nullable=False)
    previous_selling_price_cents = db.Column(db.Integer, nullable=False)
    new_selling_price_cents = db.Column(db.Integer, nullable=False)

    notes = db.Column(db.String(500), nullable=True)

    # Actor: a staff member of the store and/or an authenticated account
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    inventory_item = db.relationship("InventoryItem", backref=db.backref("restock_events", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "inventory_id": self.inventory_id,
            "quantity_added": self.quantity_added,
            "unit_cost_cents": self.unit_cost_cents,
            "cost_strategy": self.cost_strategy,
            "override_cost_cents": self.override_cost_cents,
            "previous_quantity": self.previous_quantity,
            "new_quantity": self.new_quantity,
            "previous_cost_price_cents": self.previous_cost_price_cents,
            "new_cost_price_cents": self.new_cost_price_cents,
            "previous_selling_price_cents": self.previous_selling_price_cents,
            "new_selling_price_cents": self.new_selling_price_cents,
            "notes": self.notes,
            "staff_id": self.staff_id,
            "user_id": self.user_id,
            "occurred_at": to_utc_z(self.occurred_at),
        }
