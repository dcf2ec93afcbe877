"""Loyalty repository — platform reads and writes behind one seam.

Controllers talk to this class only; the points engine never sees the
platform client. Reads fail loudly: a missing cart, customer or rate table
raises a typed error instead of returning a default.
"""

from __future__ import annotations
import logging

from fastapi import Depends

from core.integrations.commercetools import CommercetoolsAdapter
from core.platform import get_platform_client
from patterns.domain_config import LoyaltyConfig
from verticals.loyalty.config import config as service_config
from verticals.loyalty.errors import CartNotFound, CustomerNotFound, RateTableNotFound
from verticals.loyalty.models.snapshots import CartSnapshot, CustomerSnapshot
from verticals.loyalty.rate_table import Tier, parse_rate_table

log = logging.getLogger("loyalty.repository")

CART_WITH_RATE_TABLE_QUERY = """
query ($cartId: String!, $customObjectContainer: String!) {
  cart(id: $cartId) {
    customLineItems { id slug }
    totalPrice { currencyCode centAmount }
  }
  customObjects(container: $customObjectContainer) { results { key value } }
}
"""

CUSTOMER_POINTS_QUERY = """
query ($customerId: String!) {
  customer(id: $customerId) {
    id
    version
    custom { type { key } customFieldsRaw { name value } }
  }
}
"""


class LoyaltyRepository:
    """Reads carts, customers and the rate table; writes customer balances."""

    def __init__(self, client: CommercetoolsAdapter, config: LoyaltyConfig | None = None):
        self.client = client
        self.config = config or LoyaltyConfig()

    async def get_cart_with_rate_table(
        self,
        cart_id: str,
        currency_code: str | None = None,
        required: bool = True,
    ) -> tuple[CartSnapshot | None, list[Tier]]:
        """Fetch the stored cart and the tier configuration in one query.

        With ``required=False`` a missing cart (e.g. one still being created)
        comes back as None instead of raising CartNotFound.
        """
        data = await self.client.graphql(
            CART_WITH_RATE_TABLE_QUERY,
            {
                "cartId": cart_id,
                "customObjectContainer": self.config.rate_table_container,
            },
        )

        cart = data.get("cart")
        if cart is None and required:
            raise CartNotFound(f"Cart {cart_id} not found", details={"cartId": cart_id})

        custom_objects = data.get("customObjects")
        if custom_objects is None:
            raise RateTableNotFound(
                f"No custom objects in container {self.config.rate_table_container!r}"
            )

        tiers = parse_rate_table(custom_objects.get("results"), key=self.config.rate_table_key)
        snapshot = (
            CartSnapshot.from_payload(cart, cart_id=cart_id, currency_code=currency_code)
            if cart is not None
            else None
        )
        log.debug("Loaded %d tiers for cart %s", len(tiers), cart_id)
        return snapshot, tiers

    async def get_customer(self, customer_id: str) -> CustomerSnapshot:
        data = await self.client.graphql(CUSTOMER_POINTS_QUERY, {"customerId": customer_id})
        customer = data.get("customer")
        if customer is None:
            raise CustomerNotFound(
                f"Customer {customer_id} not found", details={"customerId": customer_id}
            )
        return CustomerSnapshot.from_payload(customer, customer_id=customer_id)

    async def update_customer(self, customer_id: str, version: int, actions: list[dict]) -> dict:
        return await self.client.update_customer(customer_id, version, actions)


# ---------------------------------------------------------------------------
# FastAPI dependency factory
# ---------------------------------------------------------------------------

def get_loyalty_repository(
    client: CommercetoolsAdapter = Depends(get_platform_client),
) -> LoyaltyRepository:
    """FastAPI dependency for LoyaltyRepository."""
    return LoyaltyRepository(client, service_config.loyalty)
