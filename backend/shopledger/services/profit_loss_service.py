# Overview: Profit/loss aggregation; recomputes per-item totals from the order history.

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import InventoryItem, Order, ProfitLoss
from .concurrency import run_in_transaction
from .inventory_service import get_item
"""
Profit/Loss Invariants (authoritative)

- ProfitLoss is a materialized view: every refresh recomputes all four
  totals from Order rows and the item's current state. Never patch
  incrementally.
- total_net_profit_cents = revenue - quantity_sold * CURRENT cost price.
  This is margin against the present cost basis, not historical COGS:
  a cost change after a sale changes the profit reported for that sale.
- quantity_remaining is the product's on-hand quantity; services report 0.
- refresh is idempotent: same source rows, same totals.
"""


def compute_totals(item: InventoryItem) -> tuple[int, int, int, int]:
    """(sold, remaining, revenue_cents, net_profit_cents) for item in its store."""
    row = db.session.query(
        func.coalesce(func.sum(Order.quantity), 0).label("sold"),
        func.coalesce(func.sum(Order.total_price_cents), 0).label("revenue"),
    ).filter(
        Order.store_id == item.store_id,
        Order.inventory_id == item.id,
    ).one()

    sold = int(row.sold or 0)
    revenue = int(row.revenue or 0)
    net_profit = revenue - sold * item.cost_price_cents
    remaining = item.quantity if item.is_product else 0
    return sold, remaining, revenue, net_profit


def refresh_profit_loss(store_id: int, inventory_id: int) -> ProfitLoss:
    """
    Recompute and upsert the ProfitLoss row of one item.

    Runs inside the caller's unit of work and never commits. The item row
    is locked first, which serializes concurrent refreshes of one key.
    """
    item = get_item(inventory_id, store_id=store_id, lock=True)
    sold, remaining, revenue, net_profit = compute_totals(item)

    row = (
        db.session.query(ProfitLoss)
        .filter_by(store_id=store_id, inventory_id=inventory_id)
        .populate_existing()
        .first()
    )
    if row is None:
        row = ProfitLoss(store_id=store_id, inventory_id=inventory_id)
        db.session.add(row)

    row.total_quantity_sold = sold
    row.quantity_remaining = remaining
    row.total_revenue_cents = revenue
    row.total_net_profit_cents = net_profit
    db.session.flush()
    return row


def refresh_profit_loss_now(store_id: int, inventory_id: int) -> ProfitLoss:
    """Standalone refresh in its own committed unit of work."""
    return run_in_transaction(
        lambda: refresh_profit_loss(store_id, inventory_id),
        retry_on=(IntegrityError,),
    )


def rebuild_store_profit_loss(store_id: int) -> int:
    """Recompute every item of a store; returns the number of rows refreshed."""
    def _op():
        item_ids = [
            item_id
            for (item_id,) in db.session.query(InventoryItem.id)
            .filter_by(store_id=store_id)
            .order_by(InventoryItem.id)
            .all()
        ]
        for item_id in item_ids:
            refresh_profit_loss(store_id, item_id)
        return len(item_ids)

    return run_in_transaction(_op)


def get_profit_loss(store_id: int, inventory_id: int) -> ProfitLoss | None:
    return (
        db.session.query(ProfitLoss)
        .filter_by(store_id=store_id, inventory_id=inventory_id)
        .first()
    )


def list_profit_loss(store_id: int) -> list[dict]:
    """Profit/loss rows of a store joined with their item, best sellers first."""
    rows = (
        db.session.query(ProfitLoss, InventoryItem)
        .join(InventoryItem, InventoryItem.id == ProfitLoss.inventory_id)
        .filter(ProfitLoss.store_id == store_id)
        .order_by(ProfitLoss.total_revenue_cents.desc(), InventoryItem.name)
        .all()
    )
    return [{**pl.to_dict(), "inventory": item.to_dict()} for pl, item in rows]
