# Overview: Service-layer transaction and locking primitives shared by every write path.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write_transaction()
    takes the database write lock up front instead.
    """
    return query.with_for_update()


def begin_write_transaction() -> None:
    """
    Start the unit of work holding the write lock where the engine needs it.

    SQLite: BEGIN IMMEDIATE, so two writers never both read stock/counters
    under a shared lock and then race to upgrade it.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None, retry_on: tuple = ()):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts), plus any extra exception types in
    retry_on (e.g. IntegrityError for unique-key races).
    """
    if attempts is None:
        attempts = current_app.config.get("TX_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("TX_RETRY_BACKOFF", 0.1)
    retryable = RETRYABLE_ERRORS + tuple(retry_on)

    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except retryable as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Retrying unit of work after %s (attempt %d/%d)",
                type(exc).__name__, attempt + 1, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_in_transaction(func, *, attempts: int | None = None, backoff_base: float | None = None, retry_on: tuple = ()):
    """
    Run func as one all-or-nothing unit of work.

    Commits when func returns; rolls back everything func wrote when it
    raises, then re-raises. The whole unit is retried on retryable errors.
    """
    def _op():
        begin_write_transaction()
        try:
            result = func()
            db.session.commit()
            return result
        except Exception:
            db.session.rollback()
            raise

    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base, retry_on=retry_on)
