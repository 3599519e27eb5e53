from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "transfer", "card", "flutterwave")
PAYMENT_STATUS_COMPLETED = "completed"
PAYMENT_STATUS_PENDING = "pending"


class Order(db.Model):
    """
    One line item of one sale.

    Append-only: the full order history of an item is the ground truth for
    its ProfitLoss aggregates. Never updated or deleted.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_orders_quantity_positive"),
        db.Index("ix_orders_store_item", "store_id", "inventory_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    # Price actually charged per unit (selling price or custom price at time of sale)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    inventory_item = db.relationship("InventoryItem", backref=db.backref("orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "inventory_id": self.inventory_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_price_cents": self.total_price_cents,
            "created_at": to_utc_z(self.created_at),
        }


class Checkout(db.Model):
    """
    Sale header, one per line item.

    Every checkout written by the same checkout call shares sale_reference,
    staff_id and payment_method, so a sale can be audited as a whole or
    line by line.
    """
    __tablename__ = "checkouts"
    __table_args__ = (
        db.Index("ix_checkouts_store_created", "store_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, unique=True)

    sale_reference = db.Column(db.String(32), nullable=False, index=True)
    total_price_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_STATUS_COMPLETED)
    payment_reference = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    staff = db.relationship("Staff", backref=db.backref("checkouts", lazy=True))
    order = db.relationship("Order", backref=db.backref("checkout", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "staff_id": self.staff_id,
            "order_id": self.order_id,
            "sale_reference": self.sale_reference,
            "total_price_cents": self.total_price_cents,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "payment_reference": self.payment_reference,
            "created_at": to_utc_z(self.created_at),
        }


class SaleTransaction(db.Model):
    """
    Customer-facing sales record linking customer, item and checkout.

    Its existence blocks permanent deletion of the customer and the item.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_store_date", "store_id", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)
    checkout_id = db.Column(db.Integer, db.ForeignKey("checkouts.id"), nullable=False, index=True)

    transaction_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))
    inventory_item = db.relationship("InventoryItem")
    checkout = db.relationship("Checkout", backref=db.backref("transactions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "customer_id": self.customer_id,
            "inventory_id": self.inventory_id,
            "checkout_id": self.checkout_id,
            "transaction_date": to_utc_z(self.transaction_date),
        }
