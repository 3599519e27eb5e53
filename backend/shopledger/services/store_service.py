# Overview: Service-layer operations for businesses and stores.

from __future__ import annotations

import re

from ..extensions import db
from ..models import Business, Store, StoreCounter, Customer, InventoryItem
from .concurrency import lock_for_update, run_in_transaction
from .errors import NotFoundError, InvalidArgumentError, InvalidOperationError

STORE_CODE_RE = re.compile(r"^[A-Z0-9]{1,10}$")


def normalize_store_code(code: str | None) -> str:
    """Store codes are trimmed and upper-cased; 1-10 letters or digits."""
    normalized = (code or "").strip().upper()
    if not STORE_CODE_RE.match(normalized):
        raise InvalidArgumentError("Store code must be 1-10 letters or digits.")
    return normalized


def create_business(name: str, **fields) -> Business:
    name = (name or "").strip()
    if not name:
        raise InvalidArgumentError("Business name is required.")

    def _op():
        business = Business(name=name, **fields)
        db.session.add(business)
        db.session.flush()
        return business

    return run_in_transaction(_op)


def create_store(*, business_id: int, name: str, code: str, currency: str = "NGN", address: str | None = None) -> Store:
    """
    Create a store together with its customer-number counter.

    The counter starts at 1, so the first customer of store "DT01" is DT01001.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidArgumentError("Store name is required.")
    code = normalize_store_code(code)

    def _op():
        business = db.session.get(Business, business_id)
        if business is None:
            raise NotFoundError("business")

        duplicate = db.session.query(Store).filter_by(business_id=business_id, code=code).first()
        if duplicate is not None:
            raise InvalidArgumentError(f"Store code {code} is already in use.")

        store = Store(business_id=business_id, name=name, code=code, currency=currency, address=address)
        db.session.add(store)
        db.session.flush()
        db.session.add(StoreCounter(store_id=store.id, next_customer_number=1))
        db.session.flush()
        return store

    return run_in_transaction(_op)


def get_store(store_id: int) -> Store:
    store = db.session.get(Store, store_id)
    if store is None:
        raise NotFoundError("store")
    return store


def store_has_data(store_id: int) -> bool:
    """True once customers or inventory reference the store."""
    has_customers = db.session.query(Customer.id).filter_by(store_id=store_id).first() is not None
    if has_customers:
        return True
    return db.session.query(InventoryItem.id).filter_by(store_id=store_id).first() is not None


def update_store(store_id: int, *, name: str | None = None, code: str | None = None) -> Store:
    """
    Rename a store or change its code.

    The code is part of every customer number already issued, so it is
    frozen as soon as the store holds customers or inventory.
    """
    def _op():
        store = lock_for_update(db.session.query(Store).filter_by(id=store_id)).first()
        if store is None:
            raise NotFoundError("store")

        if code is not None:
            new_code = normalize_store_code(code)
            if new_code != store.code:
                if store_has_data(store_id):
                    raise InvalidOperationError(
                        "The store code can't be changed because customers or inventory already use it."
                    )
                store.code = new_code

        if name is not None:
            if not name.strip():
                raise InvalidArgumentError("Store name is required.")
            store.name = name.strip()

        db.session.flush()
        return store

    return run_in_transaction(_op)
