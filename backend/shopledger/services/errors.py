# Overview: Expected, caller-recoverable ledger failures and their display messages.

from __future__ import annotations


class LedgerError(Exception):
    """
    Base class for every expected business failure.

    message is safe to render directly to an end user; details carries
    machine-readable context. Neither ever includes internal exception text.
    """
    code = "LEDGER_ERROR"
    http_status = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "details": self.details}


_NOT_FOUND_MESSAGES = {
    "customer": "Please select a valid customer to complete this sale.",
    "staff": "Please select a valid staff member to complete this sale.",
    "inventory": "One of the items in your cart is no longer available.",
    "store": "Please select a store first.",
}


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, message: str | None = None, details: dict | None = None):
        message = message or _NOT_FOUND_MESSAGES.get(entity, f"{entity.capitalize()} not found.")
        super().__init__(message, details={"entity": entity, **(details or {})})
        self.entity = entity


class InsufficientStockError(LedgerError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, item_name: str, available: int, requested: int | None = None, inventory_id: int | None = None):
        super().__init__(
            f"Sorry, we only have {available} {item_name} in stock.",
            details={
                "item": item_name,
                "inventory_id": inventory_id,
                "available": available,
                "requested": requested,
            },
        )
        self.item_name = item_name
        self.available = available
        self.requested = requested


class InvalidArgumentError(LedgerError):
    code = "INVALID_ARGUMENT"


class InvalidOperationError(LedgerError):
    code = "INVALID_OPERATION"


class StockConflictError(LedgerError):
    """
    A conditional stock decrement matched no row at write time.

    Internal: checkout translates it into InsufficientStockError so callers
    see the same shape whether the shortage was found before or during
    the write.
    """
    code = "CONFLICT"
    http_status = 409

    def __init__(self, inventory_id: int, requested: int):
        super().__init__(
            "Stock changed while this sale was being recorded.",
            details={"inventory_id": inventory_id, "requested": requested},
        )
        self.inventory_id = inventory_id
        self.requested = requested
