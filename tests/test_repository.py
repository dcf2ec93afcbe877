"""Test the loyalty repository over a stubbed GraphQL endpoint."""
import json

import httpx
import pytest

from core.integrations.commercetools import CommercetoolsAdapter
from patterns.domain_config import LoyaltyConfig, PlatformConfig
from verticals.loyalty.errors import CartNotFound, CustomerNotFound, RateTableNotFound
from verticals.loyalty.repository import LoyaltyRepository

PLATFORM = PlatformConfig(project_key="demo", api_url="https://api.test", auth_url="https://auth.test")

TIERS = {
    "results": [
        {"key": "bonus", "value": {"minCartValue": 0, "maxCartValue": 20000, "factor": 5, "addon": 10}}
    ]
}


def make_repo(data, config=None):
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"data": data})

    client = CommercetoolsAdapter(PLATFORM, transport=httpx.MockTransport(handler))
    return LoyaltyRepository(client, config or LoyaltyConfig()), sent


@pytest.mark.asyncio
async def test_cart_and_tiers_in_one_query():
    data = {
        "cart": {
            "customLineItems": [{"id": "cli-1", "slug": "bonus-points-earned"}],
            "totalPrice": {"currencyCode": "EUR", "centAmount": 10000},
        },
        "customObjects": TIERS,
    }
    repo, sent = make_repo(data)
    cart, tiers = await repo.get_cart_with_rate_table("cart-1")

    assert cart.id == "cart-1"
    assert cart.cent_amount == 10000
    assert cart.custom_line_items[0].slug == "bonus-points-earned"
    assert len(tiers) == 1
    assert sent[0]["variables"] == {"cartId": "cart-1", "customObjectContainer": "schemas"}


@pytest.mark.asyncio
async def test_missing_cart_raises_when_required():
    repo, _ = make_repo({"cart": None, "customObjects": TIERS})
    with pytest.raises(CartNotFound):
        await repo.get_cart_with_rate_table("cart-1")


@pytest.mark.asyncio
async def test_missing_cart_allowed_for_pending_carts():
    repo, _ = make_repo({"cart": None, "customObjects": TIERS})
    cart, tiers = await repo.get_cart_with_rate_table("cart-1", required=False)
    assert cart is None
    assert len(tiers) == 1


@pytest.mark.asyncio
async def test_empty_container_raises_rate_table_not_found():
    repo, _ = make_repo({"cart": {"totalPrice": None}, "customObjects": {"results": []}})
    with pytest.raises(RateTableNotFound):
        await repo.get_cart_with_rate_table("cart-1")


@pytest.mark.asyncio
async def test_customer_snapshot_carries_version():
    data = {
        "customer": {
            "id": "cust-1",
            "version": 12,
            "custom": {"type": {"key": "tt-loyalty-extension"}, "customFieldsRaw": []},
        }
    }
    repo, sent = make_repo(data)
    customer = await repo.get_customer("cust-1")
    assert customer.version == 12
    assert customer.custom["type"]["key"] == "tt-loyalty-extension"
    assert sent[0]["variables"] == {"customerId": "cust-1"}


@pytest.mark.asyncio
async def test_missing_customer_raises():
    repo, _ = make_repo({"customer": None})
    with pytest.raises(CustomerNotFound):
        await repo.get_customer("ghost")
