# Overview: Service-layer operations for the audit ledger; append-only event rows.

from __future__ import annotations

from typing import Optional
from datetime import datetime

from ..extensions import db
from ..models import LedgerEvent
from ..time_utils import utcnow
"""
Ledger Invariants (authoritative)

- Append-only audit log for cross-cutting domain events.
- No domain/business logic in the ledger itself.
- Events are written inside the same DB transaction as the domain event they record.
- occurred_at is business time; created_at is system time (DB default).
"""


def append_ledger_event(
    *,
    store_id: int,
    event_type: str,
    event_category: str,
    entity_type: str,
    entity_id: int,
    actor_staff_id: int | None = None,
    actor_user_id: int | None = None,
    occurred_at: Optional[datetime] = None,
    note: Optional[str] = None,
    payload: Optional[str] = None,
) -> LedgerEvent:
    """
    Append-only ledger event.

    Flushes but never commits: the caller's unit of work owns the commit.
    """
    ev = LedgerEvent(
        store_id=store_id,
        event_type=event_type,
        event_category=event_category,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_staff_id=actor_staff_id,
        actor_user_id=actor_user_id,
        occurred_at=occurred_at or utcnow(),
        note=note[:255] if note else None,
        payload=payload,
    )
    db.session.add(ev)
    db.session.flush()  # ensures ev.id is assigned without committing
    return ev


def list_ledger_events(*, store_id: int, entity_type: str | None = None, entity_id: int | None = None, limit: int = 200):
    q = db.session.query(LedgerEvent).filter_by(store_id=store_id)
    if entity_type is not None:
        q = q.filter_by(entity_type=entity_type)
    if entity_id is not None:
        q = q.filter_by(entity_id=entity_id)
    return q.order_by(LedgerEvent.occurred_at.desc(), LedgerEvent.id.desc()).limit(limit).all()
