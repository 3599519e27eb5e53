"""
Restock Service - cost basis and quantity updates when stock arrives

The strategy math lives in costing.py (pure, unit-testable); this module
owns the unit of work: item update, RestockEvent audit row and ProfitLoss
refresh are committed together or not at all.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import RestockEvent, Staff, InventoryItem
from ..time_utils import utcnow
from .concurrency import run_in_transaction
from .costing import CostStrategy, compute_restock_cost, parse_cost_strategy
from .errors import InvalidArgumentError, InvalidOperationError, NotFoundError
from .inventory_service import get_item
from .ledger_service import append_ledger_event
from .profit_loss_service import refresh_profit_loss


def _validate_request(
    *,
    quantity_added,
    unit_cost_cents,
    cost_strategy,
    override_cost_cents,
    update_selling_price: bool,
    new_selling_price_cents,
) -> CostStrategy:
    strategy = parse_cost_strategy(cost_strategy)

    if isinstance(quantity_added, bool) or not isinstance(quantity_added, int) or quantity_added < 1:
        raise InvalidArgumentError("Quantity added must be a whole number of at least 1.")
    if isinstance(unit_cost_cents, bool) or not isinstance(unit_cost_cents, int) or unit_cost_cents < 0:
        raise InvalidArgumentError("Unit cost must be zero or more.")

    if strategy is CostStrategy.OVERRIDE:
        if override_cost_cents is None:
            raise InvalidArgumentError("An override cost is required for the override strategy.")
        if isinstance(override_cost_cents, bool) or not isinstance(override_cost_cents, int) or override_cost_cents < 0:
            raise InvalidArgumentError("Override cost must be zero or more.")

    if update_selling_price:
        if new_selling_price_cents is None:
            raise InvalidArgumentError("A new selling price is required to update the selling price.")
        if (
            isinstance(new_selling_price_cents, bool)
            or not isinstance(new_selling_price_cents, int)
            or new_selling_price_cents < 0
        ):
            raise InvalidArgumentError("Selling price must be zero or more.")

    return strategy


def _restock_locked(
    item: InventoryItem,
    *,
    strategy: CostStrategy,
    quantity_added: int,
    unit_cost_cents: int,
    override_cost_cents: int | None,
    update_selling_price: bool,
    new_selling_price_cents: int | None,
    notes: str | None,
    staff_id: int | None,
    user_id: int | None,
) -> RestockEvent:
    previous_quantity = item.quantity
    previous_cost = item.cost_price_cents
    previous_price = item.selling_price_cents

    new_cost = compute_restock_cost(
        strategy,
        current_quantity=previous_quantity,
        current_cost_cents=previous_cost,
        quantity_added=quantity_added,
        unit_cost_cents=unit_cost_cents,
        override_cost_cents=override_cost_cents,
    )

    item.cost_price_cents = new_cost
    item.quantity = previous_quantity + quantity_added
    if update_selling_price:
        item.selling_price_cents = new_selling_price_cents
    db.session.flush()  # version-checked UPDATE; StaleDataError is retried

    event = RestockEvent(
        store_id=item.store_id,
        inventory_id=item.id,
        quantity_added=quantity_added,
        unit_cost_cents=unit_cost_cents,
        cost_strategy=strategy.value,
        override_cost_cents=override_cost_cents if strategy is CostStrategy.OVERRIDE else None,
        previous_quantity=previous_quantity,
        new_quantity=item.quantity,
        previous_cost_price_cents=previous_cost,
        new_cost_price_cents=new_cost,
        previous_selling_price_cents=previous_price,
        new_selling_price_cents=item.selling_price_cents,
        notes=(notes or "").strip() or None,
        staff_id=staff_id,
        user_id=user_id,
        occurred_at=utcnow(),
    )
    db.session.add(event)
    db.session.flush()

    # Quantity remaining changed even though nothing was sold
    refresh_profit_loss(item.store_id, item.id)

    append_ledger_event(
        store_id=item.store_id,
        event_type="inventory.restocked",
        event_category="inventory",
        entity_type="restock_event",
        entity_id=event.id,
        actor_staff_id=staff_id,
        actor_user_id=user_id,
        occurred_at=event.occurred_at,
        note=f"Restocked {quantity_added} x {item.name} ({strategy.value})",
        payload=f"inventory_id={item.id},cost={previous_cost}->{new_cost},quantity={previous_quantity}->{item.quantity}",
    )
    return event


def apply_restock(
    *,
    inventory_id: int,
    quantity_added: int,
    unit_cost_cents: int,
    cost_strategy,
    override_cost_cents: int | None = None,
    update_selling_price: bool = False,
    new_selling_price_cents: int | None = None,
    notes: str | None = None,
    staff_id: int | None = None,
    user_id: int | None = None,
    store_id: int | None = None,
) -> tuple[InventoryItem, RestockEvent]:
    """
    Add stock to a product and recompute its cost price.

    Services carry no cost basis to restock and fail with
    InvalidOperationError before anything is written.
    """
    strategy = _validate_request(
        quantity_added=quantity_added,
        unit_cost_cents=unit_cost_cents,
        cost_strategy=cost_strategy,
        override_cost_cents=override_cost_cents,
        update_selling_price=update_selling_price,
        new_selling_price_cents=new_selling_price_cents,
    )

    def _op():
        item = get_item(inventory_id, store_id=store_id, lock=True)
        if not item.is_product:
            raise InvalidOperationError(f"{item.name} is a service and can't be restocked.")

        if staff_id is not None:
            staff = db.session.get(Staff, staff_id, populate_existing=True)
            if staff is None or staff.store_id != item.store_id:
                raise NotFoundError("staff", message="Please select a valid staff member for this restock.")

        event = _restock_locked(
            item,
            strategy=strategy,
            quantity_added=quantity_added,
            unit_cost_cents=unit_cost_cents,
            override_cost_cents=override_cost_cents,
            update_selling_price=update_selling_price,
            new_selling_price_cents=new_selling_price_cents,
            notes=notes,
            staff_id=staff_id,
            user_id=user_id,
        )
        return item, event

    item, event = run_in_transaction(_op, retry_on=(IntegrityError,))
    current_app.logger.info(
        "Restocked inventory %s: +%s units, cost %s -> %s (%s)",
        item.id, event.quantity_added, event.previous_cost_price_cents,
        event.new_cost_price_cents, event.cost_strategy,
    )
    return item, event
