# Overview: Service-layer operations for per-store customer numbering.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Store, StoreCounter
from .concurrency import run_in_transaction
from .errors import NotFoundError

CUSTOMER_NUMBER_PAD = 3


def format_customer_number(store_code: str, value: int, pad: int = CUSTOMER_NUMBER_PAD) -> str:
    return f"{store_code}{value:0{pad}d}"


def _increment_counter(store_id: int) -> int:
    """
    Advance the store's counter by exactly one and return the value it held.

    The read-modify-write is one UPDATE statement; the row (SQLite: database)
    write lock it takes is held until the surrounding transaction ends, so
    the read-back below can only see this allocation's increment.
    """
    stmt = (
        update(StoreCounter)
        .where(StoreCounter.store_id == store_id)
        .values(next_customer_number=StoreCounter.next_customer_number + 1)
        .execution_options(synchronize_session=False)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        current = (
            db.session.query(StoreCounter.next_customer_number)
            .filter_by(store_id=store_id)
            .scalar()
        )
        return current - 1

    # Counter missing (store created outside store_service): backfill it.
    # A concurrent backfill makes this flush raise IntegrityError, which the
    # unit of work retries from the top.
    db.session.add(StoreCounter(store_id=store_id, next_customer_number=2))
    db.session.flush()
    return 1


def allocate_customer_number_locked(store_id: int) -> str:
    """Allocate inside the caller's open unit of work (no commit)."""
    store = db.session.get(Store, store_id)
    if store is None:
        raise NotFoundError("store")
    value = _increment_counter(store_id)
    return format_customer_number(store.code, value)


def allocate_customer_number(store_id: int, *, commit: bool = True) -> str:
    """
    Atomically allocate the next customer number for a store.

    commit=False joins the caller's transaction, so the increment is rolled
    back together with whatever the caller was creating.
    """
    if not commit:
        return allocate_customer_number_locked(store_id)

    return run_in_transaction(
        lambda: allocate_customer_number_locked(store_id),
        retry_on=(IntegrityError,),
    )


def peek_next_customer_number(store_id: int) -> str:
    """Preview the number the next allocation will return (no side effects)."""
    store = db.session.get(Store, store_id)
    if store is None:
        raise NotFoundError("store")
    current = (
        db.session.query(StoreCounter.next_customer_number)
        .filter_by(store_id=store_id)
        .scalar()
    )
    return format_customer_number(store.code, current or 1)
