"""Read-only snapshots of platform resources.

Maps the raw JSON of carts, orders and customers (extension payloads or
GraphQL results) onto small dataclasses the points engine works with.
Snapshots are built per request and never mutated.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional


def get_nested(data: dict[str, Any] | None, path: str) -> Any:
    """Access nested dict values via dot notation (e.g. 'totalPrice.centAmount')."""
    current: Any = data
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        else:
            return None
        if current is None:
            return None
    return current


@dataclass(frozen=True)
class CustomLineItemRef:
    """The two custom line item fields needed to find an award line item."""
    id: str
    slug: str = ""


@dataclass(frozen=True)
class CartSnapshot:
    """Cart as seen by the points engine."""
    id: str
    currency_code: str
    cent_amount: int = 0
    customer_id: Optional[str] = None
    custom_line_items: tuple[CustomLineItemRef, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(
        cls,
        cart: dict[str, Any],
        cart_id: str | None = None,
        currency_code: str | None = None,
    ) -> "CartSnapshot":
        """Build from a cart object (extension ``resource.obj`` or GraphQL ``cart``).

        ``currency_code`` is the fallback when the payload carries no total.
        """
        items = tuple(
            CustomLineItemRef(id=str(item.get("id", "")), slug=item.get("slug") or "")
            for item in cart.get("customLineItems") or []
        )
        return cls(
            id=str(cart.get("id") or cart_id or ""),
            currency_code=(
                get_nested(cart, "totalPrice.currencyCode") or currency_code or ""
            ),
            cent_amount=int(get_nested(cart, "totalPrice.centAmount") or 0),
            customer_id=cart.get("customerId"),
            custom_line_items=items,
        )


@dataclass(frozen=True)
class OrderSnapshot:
    """Order fields the confirmation path reads."""
    id: str
    customer_id: Optional[str] = None
    points: Any = None  # provisional award copied from the cart

    @classmethod
    def from_payload(cls, order: dict[str, Any]) -> "OrderSnapshot":
        return cls(
            id=str(order.get("id", "")),
            customer_id=order.get("customerId"),
            points=get_nested(order, "custom.fields.points"),
        )


@dataclass(frozen=True)
class CustomerSnapshot:
    """Customer version plus raw custom fields, as returned by GraphQL."""
    id: str
    version: int
    custom: Optional[dict[str, Any]] = None

    @classmethod
    def from_payload(cls, customer: dict[str, Any], customer_id: str = "") -> "CustomerSnapshot":
        return cls(
            id=str(customer.get("id") or customer_id),
            version=int(customer.get("version") or 0),
            custom=customer.get("custom"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, "version": self.version, "custom": self.custom}
