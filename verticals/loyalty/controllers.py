"""Cart and order lifecycle controllers.

One canonical flow per resource type; ``Create`` and ``Update`` share it.

- Cart: preview the award on the still-editable cart (line item + provisional
  ``points`` field). Nothing is added to the customer's balance here.
- Order: add the order's provisional award to the customer's balance.

The pure halves (``build_cart_actions`` / ``build_order_award``) take
already-fetched data and return plain values; the async controllers do
the reads and the single write around them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional
import logging

from patterns.domain_config import LoyaltyConfig
from verticals.loyalty.actions import (
    UpdateAction,
    find_award_line_items,
    synthesize_cart_actions,
    synthesize_customer_actions,
)
from verticals.loyalty.errors import InvalidInput, InvalidOperation
from verticals.loyalty.models.snapshots import (
    CartSnapshot,
    CustomerSnapshot,
    OrderSnapshot,
    get_nested,
)
from verticals.loyalty.rate_table import Tier, compute_earned_points, find_matching_tier
from verticals.loyalty.reconciliation import read_prior_points, reconcile_points
from verticals.loyalty.repository import LoyaltyRepository

log = logging.getLogger("loyalty.controllers")

SUPPORTED_ACTIONS = ("Create", "Update")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ExtensionResult:
    """What the HTTP layer answers the platform with."""

    status_code: int = 201
    actions: list[UpdateAction] = field(default_factory=list)


@dataclass(frozen=True)
class AwardResult:
    earned_points: int
    total_points: int


@dataclass(frozen=True)
class OrderAward:
    """Customer update produced by a confirmed order."""

    customer_id: str
    version: int
    award: AwardResult
    actions: list[UpdateAction]


def _check_action(action: str) -> None:
    if action not in SUPPORTED_ACTIONS:
        raise InvalidOperation(
            "The action is not recognized. Allowed values are 'Create' or 'Update'.",
            details={"action": action},
        )


# ---------------------------------------------------------------------------
# Cart path
# ---------------------------------------------------------------------------

def build_cart_actions(
    cart: CartSnapshot,
    tiers: list[Tier],
    config: LoyaltyConfig,
) -> tuple[AwardResult, list[UpdateAction]]:
    """Award preview and the actions that display it on the cart."""
    earned = compute_earned_points(cart.cent_amount, tiers)
    existing = find_award_line_items(cart.custom_line_items, config.line_item_slug)
    actions = synthesize_cart_actions(cart, earned, existing, config)
    return AwardResult(earned_points=earned, total_points=earned), actions


async def cart_controller(
    action: str,
    cart: dict[str, Any],
    repository: LoyaltyRepository,
    config: LoyaltyConfig | None = None,
) -> ExtensionResult:
    """Handle a cart ``Create``/``Update`` event.

    ``cart`` is the cart object from the extension payload. When it carries
    a total it is the authoritative (pending) state; otherwise the stored
    cart is read back from the platform.
    """
    _check_action(action)
    config = config or repository.config

    cart_id = str(cart.get("id") or "")
    if not cart_id:
        raise InvalidInput("Cart payload carries no id")

    pending = (
        CartSnapshot.from_payload(cart)
        if get_nested(cart, "totalPrice.centAmount") is not None
        else None
    )
    stored, tiers = await repository.get_cart_with_rate_table(
        cart_id,
        currency_code=get_nested(cart, "totalPrice.currencyCode"),
        required=pending is None,
    )
    snapshot = pending or stored

    if snapshot.cent_amount == 0:
        log.info("No total price associated with cart %s. Skipping cart update.", cart_id)
        return ExtensionResult(status_code=201, actions=[])

    award, actions = build_cart_actions(snapshot, tiers, config)
    tier = find_matching_tier(snapshot.cent_amount, tiers)
    log.info(
        "Cart %s total %s %s -> %s points (tier %s), %d actions",
        cart_id,
        snapshot.cent_amount,
        snapshot.currency_code,
        award.earned_points,
        tier.name if tier else "none",
        len(actions),
    )
    return ExtensionResult(status_code=201, actions=actions)


# ---------------------------------------------------------------------------
# Order path
# ---------------------------------------------------------------------------

def build_order_award(
    order_points: int,
    customer: CustomerSnapshot,
    config: LoyaltyConfig,
) -> Optional[OrderAward]:
    """Reconcile an order's award with the customer's balance; None = skip."""
    prior = read_prior_points(
        customer.as_dict(), config.custom_type_key, points_field=config.points_field
    )
    total = reconcile_points(order_points, prior)
    if total is None:
        return None
    return OrderAward(
        customer_id=customer.id,
        version=customer.version,
        award=AwardResult(earned_points=order_points, total_points=total),
        actions=synthesize_customer_actions(total, config),
    )


def _order_points(raw: Any) -> int:
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        log.warning("Ignoring non-numeric points value on order: %r", raw)
        return 0


async def order_controller(
    action: str,
    order: dict[str, Any],
    repository: LoyaltyRepository,
    config: LoyaltyConfig | None = None,
) -> ExtensionResult:
    """Handle an order ``Create``/``Update`` event.

    Writes the new balance to the customer (carrying the customer version
    read in the same invocation) and leaves the order itself untouched.
    """
    _check_action(action)
    config = config or repository.config
    snapshot = OrderSnapshot.from_payload(order)

    if not snapshot.customer_id:
        log.info("No customer associated with order %s. Skipping customer update.", snapshot.id)
        return ExtensionResult(status_code=201, actions=[])

    points = _order_points(snapshot.points)
    if points <= 0:
        log.info("No loyalty points on order %s. Skipping update.", snapshot.id)
        return ExtensionResult(status_code=201, actions=[])

    customer = await repository.get_customer(snapshot.customer_id)
    award = build_order_award(points, customer, config)
    if award is None:
        log.info(
            "Customer %s has not opted in to the loyalty program. Skipping update.",
            snapshot.customer_id,
        )
        return ExtensionResult(status_code=201, actions=[])

    await repository.update_customer(award.customer_id, award.version, award.actions)
    log.info(
        "Customer %s balance %d -> %d (order %s)",
        award.customer_id,
        award.award.total_points - award.award.earned_points,
        award.award.total_points,
        snapshot.id,
    )
    return ExtensionResult(status_code=201, actions=[])
