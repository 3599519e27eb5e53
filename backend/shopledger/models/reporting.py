from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ProfitLoss(db.Model):
    """
    Per (store, item) profit/loss snapshot.

    Materialized view over Order rows plus the item's current state.
    Only services/profit_loss_service.py writes it, always by full
    recomputation; never edit it by hand.
    """
    __tablename__ = "profit_loss"
    __table_args__ = (
        db.UniqueConstraint("store_id", "inventory_id", name="uq_profit_loss_store_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)

    total_quantity_sold = db.Column(db.Integer, nullable=False, default=0)
    quantity_remaining = db.Column(db.Integer, nullable=False, default=0)
    total_revenue_cents = db.Column(db.Integer, nullable=False, default=0)
    total_net_profit_cents = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    inventory_item = db.relationship("InventoryItem", backref=db.backref("profit_loss_rows", lazy=True))

    def totals(self) -> tuple[int, int, int, int]:
        return (
            self.total_quantity_sold,
            self.quantity_remaining,
            self.total_revenue_cents,
            self.total_net_profit_cents,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store_id": self.store_id,
            "inventory_id": self.inventory_id,
            "total_quantity_sold": self.total_quantity_sold,
            "quantity_remaining": self.quantity_remaining,
            "total_revenue_cents": self.total_revenue_cents,
            "total_net_profit_cents": self.total_net_profit_cents,
            "updated_at": to_utc_z(self.updated_at),
        }
