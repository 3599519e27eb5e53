# Overview: Pure cost-basis strategies for restocks; no database access.

from __future__ import annotations

from enum import Enum

from .errors import InvalidArgumentError


class CostStrategy(str, Enum):
    KEEP = "keep"          # cost basis unchanged
    LAST = "last"          # cost basis becomes the new unit cost
    WEIGHTED = "weighted"  # quantity-weighted blend of old and new stock
    OVERRIDE = "override"  # caller supplies the new cost explicitly


def parse_cost_strategy(value) -> CostStrategy:
    if isinstance(value, CostStrategy):
        return value
    try:
        return CostStrategy(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in CostStrategy)
        raise InvalidArgumentError(
            f"Cost strategy must be one of: {allowed}.",
            details={"cost_strategy": value},
        ) from None


def _require_int(name: str, value, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be a whole number.", details={name: value})
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be at least {minimum}.", details={name: value})
    return value


def weighted_average_cost_cents(
    current_quantity: int,
    current_cost_cents: int,
    quantity_added: int,
    unit_cost_cents: int,
) -> int:
    """
    (q0*c0 + qa*ca) / (q0 + qa), nearest cent, half-up.

    quantity_added >= 1 keeps the denominator positive; a negative on-hand
    quantity cannot exist, but is treated as zero rather than trusted.
    """
    q0 = max(current_quantity, 0)
    total_units = q0 + quantity_added
    total_cost = q0 * current_cost_cents + quantity_added * unit_cost_cents
    return (total_cost + (total_units // 2)) // total_units


def compute_restock_cost(
    strategy,
    *,
    current_quantity: int,
    current_cost_cents: int,
    quantity_added: int,
    unit_cost_cents: int,
    override_cost_cents: int | None = None,
) -> int:
    """Return the item's new cost price (cents) after a restock."""
    strategy = parse_cost_strategy(strategy)
    _require_int("quantity_added", quantity_added, minimum=1)
    _require_int("unit_cost_cents", unit_cost_cents, minimum=0)
    _require_int("current_cost_cents", current_cost_cents, minimum=0)

    if strategy is CostStrategy.KEEP:
        return current_cost_cents
    if strategy is CostStrategy.LAST:
        return unit_cost_cents
    if strategy is CostStrategy.WEIGHTED:
        return weighted_average_cost_cents(
            current_quantity, current_cost_cents, quantity_added, unit_cost_cents
        )

    # OVERRIDE
    if override_cost_cents is None:
        raise InvalidArgumentError("An override cost is required for the override strategy.")
    return _require_int("override_cost_cents", override_cost_cents, minimum=0)
