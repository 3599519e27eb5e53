"""
Checkout Service - all-or-nothing sale processing

A sale of N line items writes, per line, one Order, one Checkout header
(all sharing a sale_reference) and one SaleTransaction, decrements product
stock and refreshes the item's ProfitLoss row. Every write belongs to one
database transaction; any failure leaves no trace of the sale.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from flask import current_app

from ..extensions import db
from ..models import (
    Checkout,
    Customer,
    InventoryItem,
    Order,
    SaleTransaction,
    Staff,
)
from ..models.sales import PAYMENT_METHODS, PAYMENT_STATUS_COMPLETED, PAYMENT_STATUS_PENDING
from .concurrency import run_in_transaction
from .errors import (
    InsufficientStockError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    StockConflictError,
)
from .inventory_service import decrement_stock, get_item, get_quantity_on_hand
from .ledger_service import append_ledger_event
from .profit_loss_service import refresh_profit_loss

SUCCESS_MESSAGE = "Sale completed successfully"

# Settled out of band; the sale is recorded before the gateway confirms it
PENDING_PAYMENT_METHODS = {"flutterwave"}


@dataclass(frozen=True)
class CheckoutItem:
    inventory_id: int
    quantity: int
    custom_price_cents: int | None = None


@dataclass
class CheckoutResult:
    success: bool
    message: str
    checkout_ids: list[int] = field(default_factory=list)
    sale_reference: str | None = None
    total_price_cents: int = 0
    error_code: str | None = None
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        if self.success:
            return {
                "success": True,
                "message": self.message,
                "checkout_ids": list(self.checkout_ids),
                "sale_reference": self.sale_reference,
                "total_price_cents": self.total_price_cents,
            }
        return {"error": self.message, "code": self.error_code, "details": self.details}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce_item(raw: CheckoutItem | Mapping[str, Any], index: int) -> CheckoutItem:
    if isinstance(raw, CheckoutItem):
        item = raw
    elif isinstance(raw, Mapping):
        item = CheckoutItem(
            inventory_id=raw.get("inventory_id"),
            quantity=raw.get("quantity"),
            custom_price_cents=raw.get("custom_price_cents"),
        )
    else:
        raise InvalidArgumentError("Each cart item must be an object.", details={"index": index})

    if not _is_int(item.inventory_id):
        raise InvalidArgumentError("Each cart item needs an inventory item.", details={"index": index})
    if not _is_int(item.quantity) or item.quantity < 1:
        raise InvalidArgumentError(
            "Quantity must be a whole number of at least 1.",
            details={"index": index, "quantity": item.quantity},
        )
    if item.custom_price_cents is not None and (
        not _is_int(item.custom_price_cents) or item.custom_price_cents < 0
    ):
        raise InvalidArgumentError(
            "Custom price must be zero or more.",
            details={"index": index, "custom_price_cents": item.custom_price_cents},
        )
    return item


def _validate_arguments(items, payment_method: str) -> list[CheckoutItem]:
    if payment_method not in PAYMENT_METHODS:
        raise InvalidArgumentError(
            f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}.",
            details={"payment_method": payment_method},
        )
    if not items:
        raise InvalidArgumentError("Your cart is empty.")
    return [_coerce_item(raw, index) for index, raw in enumerate(items)]


def _load_customer(store_id: int, customer_id) -> Customer:
    customer = db.session.get(Customer, customer_id, populate_existing=True) if _is_int(customer_id) else None
    if customer is None or customer.store_id != store_id or customer.is_archived:
        raise NotFoundError("customer")
    return customer


def _load_staff(store_id: int, staff_id) -> Staff:
    staff = db.session.get(Staff, staff_id, populate_existing=True) if _is_int(staff_id) else None
    if staff is None or staff.store_id != store_id or staff.is_archived:
        raise NotFoundError("staff")
    return staff


def _load_and_check_stock(store_id: int, lines: list[CheckoutItem]) -> dict[int, InventoryItem]:
    """Lock every item of the cart and check the summed quantity per item."""
    requested: dict[int, int] = {}
    for line in lines:
        requested[line.inventory_id] = requested.get(line.inventory_id, 0) + line.quantity

    items: dict[int, InventoryItem] = {}
    # Fixed lock order across carts
    for inventory_id in sorted(requested):
        items[inventory_id] = get_item(inventory_id, store_id=store_id, lock=True)

    for inventory_id, quantity in requested.items():
        item = items[inventory_id]
        if item.is_product and item.quantity < quantity:
            raise InsufficientStockError(
                item.name, item.quantity, requested=quantity, inventory_id=item.id
            )
    return items


def _record_line(
    *,
    store_id: int,
    customer: Customer,
    staff: Staff,
    item: InventoryItem,
    line: CheckoutItem,
    sale_reference: str,
    payment_method: str,
    payment_reference: str | None,
) -> Checkout:
    unit_price = line.custom_price_cents if line.custom_price_cents is not None else item.selling_price_cents
    total = unit_price * line.quantity

    order = Order(
        store_id=store_id,
        inventory_id=item.id,
        quantity=line.quantity,
        unit_price_cents=unit_price,
        total_price_cents=total,
    )
    db.session.add(order)
    db.session.flush()

    checkout = Checkout(
        store_id=store_id,
        staff_id=staff.id,
        order_id=order.id,
        sale_reference=sale_reference,
        total_price_cents=total,
        payment_method=payment_method,
        payment_status=(
            PAYMENT_STATUS_PENDING if payment_method in PENDING_PAYMENT_METHODS else PAYMENT_STATUS_COMPLETED
        ),
        payment_reference=payment_reference,
    )
    db.session.add(checkout)
    db.session.flush()

    db.session.add(SaleTransaction(
        store_id=store_id,
        customer_id=customer.id,
        inventory_id=item.id,
        checkout_id=checkout.id,
    ))

    decrement_stock(item, line.quantity)
    refresh_profit_loss(store_id, item.id)

    append_ledger_event(
        store_id=store_id,
        event_type="sale.completed",
        event_category="sales",
        entity_type="checkout",
        entity_id=checkout.id,
        actor_staff_id=staff.id,
        note=f"Sold {line.quantity} x {item.name} to {customer.customer_number}",
        payload=f"sale_reference={sale_reference},order_id={order.id},total_cents={total}",
    )
    return checkout


def _translate_conflict(exc: StockConflictError) -> InsufficientStockError:
    item = db.session.get(InventoryItem, exc.inventory_id)
    name = item.name if item is not None else f"item #{exc.inventory_id}"
    return InsufficientStockError(
        name,
        get_quantity_on_hand(exc.inventory_id),
        requested=exc.requested,
        inventory_id=exc.inventory_id,
    )


def process_checkout(
    *,
    store_id: int,
    customer_id: int,
    staff_id: int,
    items: Iterable[CheckoutItem | Mapping[str, Any]],
    payment_method: str = "cash",
    payment_reference: str | None = None,
) -> CheckoutResult:
    """
    Record a sale or raise a LedgerError.

    Validation (customer, staff, every item and its stock) happens before
    the first write. The stock check is repeated at write time by the
    conditional decrement; a lost race surfaces as InsufficientStockError
    with the quantity actually left.
    """
    lines = _validate_arguments(list(items or []), payment_method)

    def _op():
        customer = _load_customer(store_id, customer_id)
        staff = _load_staff(store_id, staff_id)
        stock = _load_and_check_stock(store_id, lines)

        sale_reference = uuid.uuid4().hex
        checkout_ids = []
        total = 0
        for line in lines:
            checkout = _record_line(
                store_id=store_id,
                customer=customer,
                staff=staff,
                item=stock[line.inventory_id],
                line=line,
                sale_reference=sale_reference,
                payment_method=payment_method,
                payment_reference=payment_reference,
            )
            checkout_ids.append(checkout.id)
            total += checkout.total_price_cents

        return CheckoutResult(
            success=True,
            message=SUCCESS_MESSAGE,
            checkout_ids=checkout_ids,
            sale_reference=sale_reference,
            total_price_cents=total,
        )

    try:
        result = run_in_transaction(_op)
    except StockConflictError as exc:
        raise _translate_conflict(exc) from None

    current_app.logger.info(
        "Checkout %s completed: store=%s lines=%d total_cents=%d method=%s",
        result.sale_reference, store_id, len(result.checkout_ids),
        result.total_price_cents, payment_method,
    )
    return result


def checkout(
    *,
    store_id: int,
    customer_id: int,
    staff_id: int,
    items: Iterable[CheckoutItem | Mapping[str, Any]],
    payment_method: str = "cash",
    payment_reference: str | None = None,
) -> CheckoutResult:
    """Like process_checkout, but business failures come back as a failed result."""
    try:
        return process_checkout(
            store_id=store_id,
            customer_id=customer_id,
            staff_id=staff_id,
            items=items,
            payment_method=payment_method,
            payment_reference=payment_reference,
        )
    except LedgerError as exc:
        current_app.logger.info("Checkout rejected (%s): %s", exc.code, exc.message)
        return CheckoutResult(
            success=False,
            message=exc.message,
            error_code=exc.code,
            details=exc.details,
        )
