# Overview: Service-layer operations for store staff.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import Staff, Store
from ..models.staff import STAFF_ROLES
from .concurrency import run_in_transaction
from .errors import InvalidArgumentError, NotFoundError
from .ledger_service import append_ledger_event


def _next_staff_number(store: Store) -> str:
    # Archived rows still count; skip past gaps left by permanent deletes
    value = (db.session.query(func.count(Staff.id)).filter_by(store_id=store.id).scalar() or 0) + 1
    while True:
        candidate = f"{store.code}-S{value:03d}"
        if db.session.query(Staff.id).filter_by(store_id=store.id, staff_number=candidate).first() is None:
            return candidate
        value += 1


def create_staff(*, store_id: int, name: str, role: str = "regular", mobile_number: str | None = None) -> Staff:
    name = (name or "").strip()
    if not name:
        raise InvalidArgumentError("Staff name is required.")
    if role not in STAFF_ROLES:
        raise InvalidArgumentError(f"Role must be one of: {', '.join(STAFF_ROLES)}.")

    def _op():
        store = db.session.get(Store, store_id)
        if store is None:
            raise NotFoundError("store")
        staff = Staff(
            store_id=store_id,
            name=name,
            staff_number=_next_staff_number(store),
            mobile_number=(mobile_number or "").strip() or None,
            role=role,
        )
        db.session.add(staff)
        db.session.flush()
        append_ledger_event(
            store_id=store_id,
            event_type="staff.created",
            event_category="staff",
            entity_type="staff",
            entity_id=staff.id,
        )
        return staff

    return run_in_transaction(_op)


def list_staff(store_id: int, *, include_archived: bool = False) -> list[Staff]:
    q = db.session.query(Staff).filter_by(store_id=store_id)
    if not include_archived:
        q = q.filter_by(is_archived=False)
    return q.order_by(Staff.name).all()
