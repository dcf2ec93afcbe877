"""Points reconciliation — merge a confirmed award into a stored balance.

Applies to the order path only. A customer takes part in the loyalty
program when the loyalty custom type is assigned to them; customers
without it (or with another custom type) are skipped rather than enrolled.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from verticals.loyalty.errors import StoredPointsMalformed


@dataclass(frozen=True)
class PriorPoints:
    """Points already stored on a customer.

    ``opted_in`` is False when the customer carries no loyalty custom type;
    ``points`` is then meaningless.
    """

    opted_in: bool
    points: int = 0


NOT_OPTED_IN = PriorPoints(opted_in=False)


def _as_points(value: Any, customer_id: str, points_field: str) -> int:
    if value is None:
        return 0
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or (isinstance(value, float) and not value.is_integer())
    ):
        raise StoredPointsMalformed(
            f"Customer {customer_id} has a non-integer {points_field!r} value: {value!r}",
            details={"customerId": customer_id, "field": points_field},
        )
    points = int(value)
    if points < 0:
        raise StoredPointsMalformed(
            f"Customer {customer_id} has a negative {points_field!r} value: {points}",
            details={"customerId": customer_id, "field": points_field},
        )
    return points


def read_prior_points(
    customer: dict,
    custom_type_key: str,
    points_field: str = "points",
) -> PriorPoints:
    """Extract the stored balance from a GraphQL customer.

    Expected shape::

        {"version": 3,
         "custom": {"type": {"key": "tt-loyalty-extension"},
                    "customFieldsRaw": [{"name": "points", "value": 120}]}}

    - no ``custom``                        → NOT_OPTED_IN
    - ``custom.type.key`` is another type → NOT_OPTED_IN
    - loyalty type but no points field     → 0
    """
    custom = customer.get("custom")
    if not custom:
        return NOT_OPTED_IN

    type_key = (custom.get("type") or {}).get("key")
    fields = custom.get("customFieldsRaw") or []
    points_entry = next((f for f in fields if f.get("name") == points_field), None)

    if type_key is not None and type_key != custom_type_key:
        return NOT_OPTED_IN
    if type_key is None and fields and points_entry is None:
        # Type key not selected: other fields without ours means another type
        return NOT_OPTED_IN

    if points_entry is None:
        return PriorPoints(opted_in=True, points=0)
    points = _as_points(points_entry.get("value"), str(customer.get("id", "")), points_field)
    return PriorPoints(opted_in=True, points=points)


def reconcile_points(earned_points: int, prior: PriorPoints) -> Optional[int]:
    """New balance after adding ``earned_points``; None means skip."""
    if earned_points < 0:
        raise ValueError(f"earned_points must be non-negative, got {earned_points}")
    if not prior.opted_in:
        return None
    if prior.points < 0:
        raise ValueError(f"prior points must be non-negative, got {prior.points}")
    return earned_points + prior.points
