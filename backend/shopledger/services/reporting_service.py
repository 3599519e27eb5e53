# Overview: Read-side reports over the sales ledger; no writes.

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import (
    Checkout,
    Customer,
    InventoryItem,
    ProfitLoss,
    SaleTransaction,
    Staff,
)
from ..models.inventory import ITEM_TYPE_PRODUCT, ITEM_TYPE_SERVICE
from ..time_utils import parse_iso_datetime
from .errors import InvalidArgumentError
from .store_service import get_store

SALES_TREND_DAYS = 30
TOP_REVENUE_ITEMS = 10


def _is_date_only(value: str) -> bool:
    return len(value.strip()) == len("YYYY-MM-DD")


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    """
    Parse an inclusive ISO-8601 range.

    A date-only end covers that whole day, so start=end=2024-05-01 returns
    the sales made on May 1st.
    """
    try:
        start_dt = parse_iso_datetime(start) if start else None
        end_dt = parse_iso_datetime(end) if end else None
    except ValueError:
        raise InvalidArgumentError("Dates must be ISO-8601, e.g. 2024-05-01 or 2024-05-01T09:30:00Z.") from None
    if end_dt and _is_date_only(end):
        end_dt = end_dt + timedelta(days=1) - timedelta(microseconds=1)
    if start_dt and end_dt and start_dt > end_dt:
        raise InvalidArgumentError("The start date must be before the end date.")
    return start_dt, end_dt


def dashboard_stats(store_id: int) -> dict:
    get_store(store_id)
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 5)

    def _count(model, *criteria) -> int:
        return db.session.query(func.count(model.id)).filter(model.store_id == store_id, *criteria).scalar() or 0

    revenue, profit = db.session.query(
        func.coalesce(func.sum(ProfitLoss.total_revenue_cents), 0),
        func.coalesce(func.sum(ProfitLoss.total_net_profit_cents), 0),
    ).filter(ProfitLoss.store_id == store_id).one()

    low_stock = (
        db.session.query(InventoryItem)
        .filter(
            InventoryItem.store_id == store_id,
            InventoryItem.type == ITEM_TYPE_PRODUCT,
            InventoryItem.quantity <= threshold,
        )
        .order_by(InventoryItem.quantity, InventoryItem.name)
        .all()
    )

    return {
        "total_customers": _count(Customer, Customer.is_archived.is_(False)),
        "total_staff": _count(Staff, Staff.is_archived.is_(False)),
        "total_inventory": _count(InventoryItem),
        "total_products": _count(InventoryItem, InventoryItem.type == ITEM_TYPE_PRODUCT),
        "total_services": _count(InventoryItem, InventoryItem.type == ITEM_TYPE_SERVICE),
        "total_transactions": _count(SaleTransaction),
        "total_revenue_cents": int(revenue),
        "total_profit_cents": int(profit),
        "low_stock_threshold": threshold,
        "low_stock_items": [item.to_dict() for item in low_stock],
    }


def sales_trends(store_id: int, *, days: int = SALES_TREND_DAYS) -> list[dict]:
    """Revenue and transaction count per sale day; the most recent `days` days with sales."""
    get_store(store_id)
    day = func.date(SaleTransaction.transaction_date)

    rows = (
        db.session.query(
            day.label("date"),
            func.coalesce(func.sum(Checkout.total_price_cents), 0).label("revenue"),
            func.count(SaleTransaction.id).label("transactions"),
        )
        .join(Checkout, Checkout.id == SaleTransaction.checkout_id)
        .filter(SaleTransaction.store_id == store_id)
        .group_by(day)
        .order_by(day.desc())
        .limit(days)
        .all()
    )
    return [
        {"date": str(r.date), "revenue_cents": int(r.revenue), "transactions": int(r.transactions)}
        for r in reversed(rows)
    ]


def revenue_by_item(store_id: int, *, limit: int = TOP_REVENUE_ITEMS) -> list[dict]:
    get_store(store_id)
    rows = (
        db.session.query(InventoryItem.name, InventoryItem.type, ProfitLoss.total_revenue_cents)
        .join(InventoryItem, InventoryItem.id == ProfitLoss.inventory_id)
        .filter(ProfitLoss.store_id == store_id)
        .order_by(ProfitLoss.total_revenue_cents.desc(), InventoryItem.name)
        .limit(limit)
        .all()
    )
    return [{"name": name, "value_cents": int(value), "type": item_type} for name, item_type, value in rows]


def list_transactions(store_id: int, *, start: str | None = None, end: str | None = None) -> list[dict]:
    """Sales transactions of a store, newest first, with customer, item and checkout."""
    get_store(store_id)
    start_dt, end_dt = _parse_range(start, end)

    query = (
        db.session.query(SaleTransaction, Customer, InventoryItem, Checkout)
        .join(Customer, Customer.id == SaleTransaction.customer_id)
        .join(InventoryItem, InventoryItem.id == SaleTransaction.inventory_id)
        .join(Checkout, Checkout.id == SaleTransaction.checkout_id)
        .filter(SaleTransaction.store_id == store_id)
    )
    if start_dt:
        query = query.filter(SaleTransaction.transaction_date >= start_dt)
    if end_dt:
        query = query.filter(SaleTransaction.transaction_date <= end_dt)

    rows = query.order_by(SaleTransaction.transaction_date.desc(), SaleTransaction.id.desc()).all()
    return [
        {
            **tx.to_dict(),
            "customer": customer.to_dict(),
            "inventory": item.to_dict(),
            "checkout": checkout.to_dict(),
        }
        for tx, customer, item, checkout in rows
    ]
