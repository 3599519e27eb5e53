# Overview: Service-layer operations for inventory; encapsulates stock reads and writes.

# backend/shopledger/services/inventory_service.py

from sqlalchemy import update

from ..extensions import db
from ..models import InventoryItem, RestockEvent, Store
from ..models.inventory import ITEM_TYPE_PRODUCT, ITEM_TYPES
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidArgumentError, NotFoundError, StockConflictError
from .ledger_service import append_ledger_event
"""
Inventory Invariants (authoritative)

Stock model:
- InventoryItem.quantity is the on-hand count for products; services have
  no stock and are never decremented.
- quantity may never go negative. Decrements are a single conditional
  UPDATE (quantity >= n); a zero-row result is a lost race, not a bug.
- Increments happen only through restocks, under a row lock.

Money:
- All prices/costs are integer cents.
"""


def get_item(inventory_id: int, *, store_id: int | None = None, lock: bool = False) -> InventoryItem:
    """
    Load an item, optionally asserting it belongs to store_id.

    lock=True re-reads the row under SELECT ... FOR UPDATE so the values are
    current even if the session already holds a stale copy.
    """
    query = db.session.query(InventoryItem).filter_by(id=inventory_id)
    if lock:
        query = lock_for_update(query).populate_existing()
    item = query.first()
    if item is None:
        raise NotFoundError("inventory")
    if store_id is not None and item.store_id != store_id:
        raise NotFoundError("inventory")
    return item


def get_quantity_on_hand(inventory_id: int) -> int:
    """Fresh read of the stored quantity, bypassing the identity map."""
    value = (
        db.session.query(InventoryItem.quantity)
        .filter(InventoryItem.id == inventory_id)
        .scalar()
    )
    return int(value or 0)


def decrement_stock(item: InventoryItem, quantity: int) -> InventoryItem:
    """
    Remove quantity units of a product atomically.

    UPDATE ... SET quantity = quantity - n WHERE id = ? AND quantity >= n.
    The stock check and the write are one statement, so concurrent
    checkouts can never both take the last units. Raises StockConflictError
    when the row no longer has enough stock.
    """
    if not item.is_product:
        return item

    stmt = (
        update(InventoryItem)
        .where(InventoryItem.id == item.id, InventoryItem.quantity >= quantity)
        .values(
            quantity=InventoryItem.quantity - quantity,
            version_id=InventoryItem.version_id + 1,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        raise StockConflictError(item.id, quantity)

    db.session.refresh(item)
    return item


def list_restock_events(*, inventory_id: int, limit: int = 200):
    get_item(inventory_id)
    return (
        db.session.query(RestockEvent)
        .filter_by(inventory_id=inventory_id)
        .order_by(RestockEvent.occurred_at.desc(), RestockEvent.id.desc())
        .limit(limit)
        .all()
    )


def create_item(
    *,
    store_id: int,
    name: str,
    item_type: str = ITEM_TYPE_PRODUCT,
    cost_price_cents: int = 0,
    selling_price_cents: int = 0,
    quantity: int = 0,
) -> InventoryItem:
    """
    Create an inventory item in a store.

    Services never hold stock, so their quantity is stored as 0 whatever
    the caller passes.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidArgumentError("Item name is required.")
    if item_type not in ITEM_TYPES:
        raise InvalidArgumentError(f"Item type must be one of: {', '.join(ITEM_TYPES)}.")
    for field_name, value in (
        ("cost_price_cents", cost_price_cents),
        ("selling_price_cents", selling_price_cents),
        ("quantity", quantity),
    ):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgumentError(f"{field_name} must be a whole number, zero or more.")

    def _op():
        if db.session.get(Store, store_id) is None:
            raise NotFoundError("store")
        if db.session.query(InventoryItem.id).filter_by(store_id=store_id, name=name).first() is not None:
            raise InvalidArgumentError(f"An item named {name} already exists in this store.")

        item = InventoryItem(
            store_id=store_id,
            name=name,
            type=item_type,
            cost_price_cents=cost_price_cents,
            selling_price_cents=selling_price_cents,
            quantity=quantity if item_type == ITEM_TYPE_PRODUCT else 0,
        )
        db.session.add(item)
        db.session.flush()
        append_ledger_event(
            store_id=store_id,
            event_type="inventory.created",
            event_category="inventory",
            entity_type="inventory_item",
            entity_id=item.id,
            note=f"{name} created",
        )
        return item

    return run_in_transaction(_op)
