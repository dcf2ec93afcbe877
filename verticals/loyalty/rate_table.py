"""Rate table lookup — cart total to bonus points.

Pure functions: no platform calls, no logging side effects beyond the
returned values. The rate table is an ordered list of tiers; when several
tiers cover the same total the LAST one in list order wins. List order is
the order the configuration was delivered in (custom objects in result
order, tier blocks in document order).
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Any, Optional, Sequence

from verticals.loyalty.errors import RateTableMalformed, RateTableNotFound

TIER_FIELDS = ("minCartValue", "maxCartValue", "factor", "addon")


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Tier:
    """One row of the rate table. Bounds are inclusive cent amounts."""

    min_cart_value: int
    max_cart_value: int
    factor: Decimal
    addon: Decimal
    name: str = ""

    def matches(self, cart_total: int) -> bool:
        return self.min_cart_value <= cart_total <= self.max_cart_value

    def points_for(self, cart_total: int) -> int:
        """Apply ``round(total / 100 * factor + addon)``, rounding once."""
        raw = Decimal(cart_total) / 100 * self.factor + self.addon
        return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _number(block: dict, field_name: str, where: str) -> Decimal:
    value = block.get(field_name)
    # bool is a Real subclass; a flag is never a valid amount
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        raise RateTableMalformed(
            f"Tier {where} has invalid {field_name!r}: {value!r}",
            details={"tier": where, "field": field_name},
        )
    return Decimal(str(value))


def parse_tier(block: Any, name: str = "") -> Tier:
    """Validate one tier block and build a Tier from it."""
    if not isinstance(block, dict):
        raise RateTableMalformed(
            f"Tier {name or '?'} is not an object", details={"tier": name}
        )

    where = name or "?"
    min_value = _number(block, "minCartValue", where)
    max_value = _number(block, "maxCartValue", where)
    factor = _number(block, "factor", where)
    addon = _number(block, "addon", where)

    for field_name, bound in (("minCartValue", min_value), ("maxCartValue", max_value)):
        if bound != bound.to_integral_value():
            raise RateTableMalformed(
                f"Tier {where} has a fractional {field_name!r}: {bound}",
                details={"tier": where, "field": field_name},
            )
    if min_value < 0 or max_value < 0:
        raise RateTableMalformed(
            f"Tier {where} has negative bounds", details={"tier": where}
        )
    if min_value > max_value:
        raise RateTableMalformed(
            f"Tier {where} has minCartValue above maxCartValue",
            details={"tier": where},
        )

    return Tier(
        min_cart_value=int(min_value),
        max_cart_value=int(max_value),
        factor=factor,
        addon=addon,
        name=name,
    )


def _is_tier_block(value: Any) -> bool:
    return isinstance(value, dict) and "minCartValue" in value


def parse_rate_table(
    results: Sequence[dict] | None,
    key: Optional[str] = None,
) -> list[Tier]:
    """Flatten custom-object results into an ordered tier list.

    Each result is ``{key, value}``; ``value`` is either a single tier block
    or a mapping of named tier blocks. Every object in the container is
    read; ``key`` restricts loading to one custom object.
    """
    if results is not None and not isinstance(results, list):
        raise RateTableMalformed(
            f"Rate table results must be a list, got {type(results).__name__}",
            details={"results": type(results).__name__},
        )

    for index, entry in enumerate(results or []):
        if not isinstance(entry, dict):
            raise RateTableMalformed(
                f"Rate table entry {index} is not an object",
                details={"index": index},
            )

    entries = [r for r in (results or []) if key is None or r.get("key") == key]
    if not entries:
        raise RateTableNotFound(
            "No rate table configuration found"
            + (f" for key {key!r}" if key else "")
        )

    tiers: list[Tier] = []
    for entry in entries:
        entry_key = str(entry.get("key", ""))
        value = entry.get("value")
        if _is_tier_block(value):
            tiers.append(parse_tier(value, name=entry_key))
        elif isinstance(value, dict) and value:
            for block_name, block in value.items():
                tiers.append(parse_tier(block, name=f"{entry_key}.{block_name}"))
        else:
            raise RateTableMalformed(
                f"Rate table {entry_key!r} holds no tier blocks",
                details={"key": entry_key},
            )
    return tiers


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_matching_tier(cart_total: int, tiers: Sequence[Tier]) -> Tier | None:
    """Return the last tier covering ``cart_total``, or None."""
    matched = None
    for tier in tiers:
        if tier.matches(cart_total):
            matched = tier
    return matched


def compute_earned_points(cart_total: int, tiers: Sequence[Tier]) -> int:
    """Points earned for a cart total in cents. ``0`` when no tier matches.

    Example::

        tiers = [Tier(0, 20000, Decimal(5), Decimal(10))]
        compute_earned_points(10000, tiers)  # 510
    """
    if isinstance(cart_total, bool) or not isinstance(cart_total, int):
        raise ValueError(f"cart_total must be an integer cent amount, got {cart_total!r}")
    if cart_total < 0:
        raise ValueError(f"cart_total must be non-negative, got {cart_total}")

    tier = find_matching_tier(cart_total, tiers)
    if tier is None:
        return 0
    return tier.points_for(cart_total)
