"""Update-action synthesis for carts and customers.

Turns a computed award into the platform's update-action vocabulary. The
award line item is found again on the next pass by its fixed slug, so
every recomputation replaces the previous award instead of stacking a new
one next to it.
"""

from __future__ import annotations
from typing import Any, Iterable, Sequence

from patterns.domain_config import LoyaltyConfig
from verticals.loyalty.models.snapshots import CartSnapshot, CustomLineItemRef

UpdateAction = dict[str, Any]

AWARD_NAMES = {
    "EN": "Bonus points earned {points}",
    "DE": "Bonus Punkte erhalten {points}",
}


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_award_line_items(
    custom_line_items: Iterable[CustomLineItemRef],
    slug: str,
) -> list[CustomLineItemRef]:
    """Return every award line item on the cart, in cart order.

    Matches the fixed slug, and also ``<slug>-<n>`` slugs written by
    releases that embedded the point value.
    """
    return [
        item
        for item in custom_line_items
        if item.slug == slug or item.slug.startswith(f"{slug}-")
    ]


# ---------------------------------------------------------------------------
# Single actions
# ---------------------------------------------------------------------------

def remove_custom_line_item(line_item_id: str) -> UpdateAction:
    return {"action": "removeCustomLineItem", "customLineItemId": line_item_id}


def add_award_line_item(
    points: int,
    currency_code: str,
    config: LoyaltyConfig,
) -> UpdateAction:
    return {
        "action": "addCustomLineItem",
        "name": {lang: text.format(points=points) for lang, text in AWARD_NAMES.items()},
        "money": {"centAmount": 0, "currencyCode": currency_code},
        "slug": config.line_item_slug,
        "taxCategory": {"typeId": "tax-category", "key": config.tax_category_key},
        "quantity": 1,
    }


def set_points_custom_type(points: int, config: LoyaltyConfig) -> UpdateAction:
    return {
        "action": "setCustomType",
        "type": {"key": config.custom_type_key, "typeId": "type"},
        "fields": {config.points_field: points},
    }


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

def synthesize_cart_actions(
    cart: CartSnapshot,
    earned_points: int,
    existing_award_line_items: Sequence[CustomLineItemRef] = (),
    config: LoyaltyConfig | None = None,
) -> list[UpdateAction]:
    """Actions that leave exactly one award line item on the cart.

    Order matters: the platform applies the batch in array order, so every
    stale line item is removed before the new one is added.

    A zero award clears a stale award (line items and provisional points)
    and is otherwise a no-op.
    """
    config = config or LoyaltyConfig()
    actions: list[UpdateAction] = [
        remove_custom_line_item(item.id) for item in existing_award_line_items
    ]

    if earned_points <= 0:
        if actions:
            actions.append(set_points_custom_type(0, config))
        return actions

    actions.append(add_award_line_item(earned_points, cart.currency_code, config))
    actions.append(set_points_custom_type(earned_points, config))
    return actions


def synthesize_customer_actions(
    total_points: int,
    config: LoyaltyConfig | None = None,
) -> list[UpdateAction]:
    """Customer update carrying the reconciled balance."""
    config = config or LoyaltyConfig()
    return [set_points_custom_type(total_points, config)]
