# Overview: Service-layer operations for customers; numbering via sequence_service.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer
from .concurrency import run_in_transaction
from .errors import InvalidArgumentError
from .ledger_service import append_ledger_event
from .sequence_service import allocate_customer_number


def create_customer(
    *,
    store_id: int,
    name: str,
    mobile_number: str | None = None,
    country_code: str | None = None,
    address: str | None = None,
) -> Customer:
    """
    Create a customer with the next customer number of its store.

    Allocation and insert share one transaction: a failed insert also
    rolls back the counter, so no number is ever skipped or reused.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidArgumentError("Customer name is required.")

    def _op():
        customer_number = allocate_customer_number(store_id, commit=False)
        customer = Customer(
            store_id=store_id,
            name=name,
            customer_number=customer_number,
            mobile_number=(mobile_number or "").strip() or None,
            country_code=country_code or "+234",
            address=(address or "").strip(),
        )
        db.session.add(customer)
        db.session.flush()

        append_ledger_event(
            store_id=store_id,
            event_type="customer.created",
            event_category="customers",
            entity_type="customer",
            entity_id=customer.id,
            note=f"Customer {customer_number} created",
        )
        return customer

    return run_in_transaction(_op, retry_on=(IntegrityError,))
