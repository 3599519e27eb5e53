# Overview: Soft-delete, restore and guarded permanent deletion of store records.

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Staff, InventoryItem, SaleTransaction, Checkout, Order, RestockEvent, ProfitLoss
from .concurrency import lock_for_update, run_in_transaction
from .errors import NotFoundError, InvalidOperationError
from .ledger_service import append_ledger_event
"""
Record lifecycle rules

- Customers and staff are archived (is_archived=True), never silently removed.
- Permanent deletion requires the record to be archived first.
- Any sales/restock history referencing a record blocks its permanent
  deletion; Order, Checkout, SaleTransaction and RestockEvent rows are the
  audit trail and are never deleted to make room.
"""

_ARCHIVABLE = {
    "customer": Customer,
    "staff": Staff,
}


def _load_locked(model, entity: str, record_id: int):
    record = lock_for_update(db.session.query(model).filter_by(id=record_id)).first()
    if record is None:
        raise NotFoundError(entity, message=f"{entity.capitalize()} not found.")
    return record


def _set_archived(entity: str, record_id: int, archived: bool):
    model = _ARCHIVABLE[entity]

    def _op():
        record = _load_locked(model, entity, record_id)
        if record.is_archived != archived:
            record.is_archived = archived
            db.session.flush()
            append_ledger_event(
                store_id=record.store_id,
                event_type=f"{entity}.{'archived' if archived else 'restored'}",
                event_category="customers" if entity == "customer" else "staff",
                entity_type=entity,
                entity_id=record.id,
            )
        return record

    return run_in_transaction(_op)


def archive_customer(customer_id: int) -> Customer:
    return _set_archived("customer", customer_id, True)


def restore_customer(customer_id: int) -> Customer:
    return _set_archived("customer", customer_id, False)


def archive_staff(staff_id: int) -> Staff:
    return _set_archived("staff", staff_id, True)


def restore_staff(staff_id: int) -> Staff:
    return _set_archived("staff", staff_id, False)


def customer_has_transactions(customer_id: int) -> bool:
    return db.session.query(SaleTransaction.id).filter_by(customer_id=customer_id).first() is not None


def staff_has_history(staff_id: int) -> bool:
    for model in (Checkout, RestockEvent):
        if db.session.query(model.id).filter_by(staff_id=staff_id).first() is not None:
            return True
    return False


def inventory_has_history(inventory_id: int) -> bool:
    for model in (Order, SaleTransaction, RestockEvent):
        if db.session.query(model.id).filter_by(inventory_id=inventory_id).first() is not None:
            return True
    return False


def delete_customer_permanently(customer_id: int) -> None:
    def _op():
        customer = _load_locked(Customer, "customer", customer_id)
        if not customer.is_archived:
            raise InvalidOperationError("Only archived customers can be permanently deleted.")
        if customer_has_transactions(customer_id):
            raise InvalidOperationError(
                "Cannot permanently delete customer with existing transactions. "
                "This customer has purchase history that must be preserved for your records."
            )
        append_ledger_event(
            store_id=customer.store_id,
            event_type="customer.deleted",
            event_category="customers",
            entity_type="customer",
            entity_id=customer.id,
            note=f"Customer {customer.customer_number} deleted",
        )
        db.session.delete(customer)
        db.session.flush()

    run_in_transaction(_op)


def delete_staff_permanently(staff_id: int) -> None:
    def _op():
        staff = _load_locked(Staff, "staff", staff_id)
        if not staff.is_archived:
            raise InvalidOperationError("Only archived staff members can be permanently deleted.")
        if staff_has_history(staff_id):
            raise InvalidOperationError(
                "Cannot permanently delete a staff member with sales or restock history. "
                "This history must be preserved for your records."
            )
        append_ledger_event(
            store_id=staff.store_id,
            event_type="staff.deleted",
            event_category="staff",
            entity_type="staff",
            entity_id=staff.id,
        )
        db.session.delete(staff)
        db.session.flush()

    run_in_transaction(_op)


def delete_inventory_item(inventory_id: int) -> None:
    """Delete an item that has never been sold or restocked."""
    def _op():
        item = _load_locked(InventoryItem, "inventory", inventory_id)
        if inventory_has_history(inventory_id):
            raise InvalidOperationError(
                f"Cannot delete {item.name} because it has sales or restock history."
            )
        db.session.query(ProfitLoss).filter_by(inventory_id=inventory_id).delete(synchronize_session=False)
        append_ledger_event(
            store_id=item.store_id,
            event_type="inventory.deleted",
            event_category="inventory",
            entity_type="inventory_item",
            entity_id=item.id,
            note=f"{item.name} deleted",
        )
        db.session.delete(item)
        db.session.flush()

    run_in_transaction(_op)
