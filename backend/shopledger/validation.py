from __future__ import annotations

from typing import Any

from .services.checkout_service import CheckoutItem
from .services.errors import InvalidArgumentError


# Maximum money amount: 9,999,999.99 in major units (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


class ValidationError(InvalidArgumentError):
    """400-level input problem in a request payload."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


def coerce_int(key: str, value: Any, *, minimum: int | None = None, maximum: int | None = None) -> int:
    """
    Strict integer coercion for JSON and query-string input.

    Accepts ints and plain digit strings; rejects bools, floats, decimals
    and scientific notation rather than truncating them.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer", key)
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)", key)
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)", key)
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer", key) from None
    elif isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal", key)
    else:
        raise ValidationError(f"{key} must be an integer", key)

    if minimum is not None and result < minimum:
        raise ValidationError(f"{key} must be at least {minimum}", key)
    if maximum is not None and result > maximum:
        raise ValidationError(f"{key} must be at most {maximum}", key)
    return result


def coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no", ""):
        return False
    raise ValidationError(f"{key} must be true or false", key)


def _optional_str(payload: dict, key: str, max_length: int) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    if len(value) > max_length:
        raise ValidationError(f"{key} must be at most {max_length} characters", key)
    return value or None


def _require(payload: dict, key: str) -> Any:
    if payload.get(key) is None:
        raise ValidationError(f"{key} is required", key)
    return payload[key]


def _money(key: str, value: Any) -> int:
    return coerce_int(key, value, minimum=0, maximum=MAX_PRICE_CENTS)


def require_store_id(args) -> int:
    """store_id from a query string; every store-scoped read needs it."""
    return coerce_int("store_id", _require(args, "store_id"), minimum=1)


def parse_checkout_payload(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    raw_items = _require(payload, "items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list", "items")

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object", "items")
        custom = raw.get("custom_price_cents")
        items.append(CheckoutItem(
            inventory_id=coerce_int(f"items[{index}].inventory_id", _require(raw, "inventory_id"), minimum=1),
            quantity=coerce_int(f"items[{index}].quantity", _require(raw, "quantity"), minimum=1),
            custom_price_cents=None if custom is None else _money(f"items[{index}].custom_price_cents", custom),
        ))

    return {
        "store_id": coerce_int("store_id", _require(payload, "store_id"), minimum=1),
        "customer_id": coerce_int("customer_id", _require(payload, "customer_id"), minimum=1),
        "staff_id": coerce_int("staff_id", _require(payload, "staff_id"), minimum=1),
        "items": items,
        "payment_method": str(payload.get("payment_method") or "cash").strip().lower(),
        "payment_reference": _optional_str(payload, "payment_reference", 128),
    }


def parse_restock_payload(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    update_selling_price = coerce_bool("update_selling_price", payload.get("update_selling_price", False))
    new_price = payload.get("new_selling_price_cents")
    override = payload.get("override_cost_cents")
    staff_id = payload.get("staff_id")
    user_id = payload.get("user_id")

    return {
        "quantity_added": coerce_int("quantity_added", _require(payload, "quantity_added"), minimum=1),
        "unit_cost_cents": _money("unit_cost_cents", _require(payload, "unit_cost_cents")),
        "cost_strategy": str(_require(payload, "cost_strategy")),
        "override_cost_cents": None if override is None else _money("override_cost_cents", override),
        "update_selling_price": update_selling_price,
        "new_selling_price_cents": None if new_price is None else _money("new_selling_price_cents", new_price),
        "notes": _optional_str(payload, "notes", 500),
        "staff_id": None if staff_id is None else coerce_int("staff_id", staff_id, minimum=1),
        "user_id": None if user_id is None else coerce_int("user_id", user_id, minimum=1),
    }


def parse_customer_payload(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    name = _optional_str(payload, "name", 255)
    if not name:
        raise ValidationError("name is required", "name")

    return {
        "store_id": coerce_int("store_id", _require(payload, "store_id"), minimum=1),
        "name": name,
        "mobile_number": _optional_str(payload, "mobile_number", 32),
        "country_code": _optional_str(payload, "country_code", 8),
        "address": _optional_str(payload, "address", 255),
    }
