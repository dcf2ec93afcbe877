"""Shared fixtures: an in-memory repository standing in for the platform."""
import pytest

from patterns.domain_config import LoyaltyConfig
from verticals.loyalty.errors import CartNotFound, CustomerNotFound
from verticals.loyalty.models.snapshots import CartSnapshot, CustomerSnapshot
from verticals.loyalty.rate_table import parse_rate_table
from verticals.loyalty.repository import LoyaltyRepository

RATE_TABLE = [
    {
        "key": "bonus-tiers",
        "value": {
            "standard": {"minCartValue": 0, "maxCartValue": 20000, "factor": 5, "addon": 10},
            "premium": {"minCartValue": 20001, "maxCartValue": 1000000, "factor": 8, "addon": 100},
        },
    }
]


class FakeLoyaltyRepository(LoyaltyRepository):
    """Serves carts, customers and tiers from dicts; records customer updates."""

    def __init__(self, carts=None, customers=None, rate_table=RATE_TABLE, config=None):
        super().__init__(client=None, config=config or LoyaltyConfig())
        self.carts = carts or {}
        self.customers = customers or {}
        self.rate_table = rate_table
        self.updates = []
        self.cart_reads = []

    async def get_cart_with_rate_table(self, cart_id, currency_code=None, required=True):
        self.cart_reads.append(cart_id)
        cart = self.carts.get(cart_id)
        if cart is None and required:
            raise CartNotFound(f"Cart {cart_id} not found")
        tiers = parse_rate_table(self.rate_table, key=self.config.rate_table_key)
        snapshot = (
            CartSnapshot.from_payload(cart, cart_id=cart_id, currency_code=currency_code)
            if cart is not None
            else None
        )
        return snapshot, tiers

    async def get_customer(self, customer_id):
        customer = self.customers.get(customer_id)
        if customer is None:
            raise CustomerNotFound(f"Customer {customer_id} not found")
        return CustomerSnapshot.from_payload(customer, customer_id=customer_id)

    async def update_customer(self, customer_id, version, actions):
        self.updates.append({"id": customer_id, "version": version, "actions": actions})
        return {"id": customer_id, "version": version + 1}


@pytest.fixture
def repo():
    return FakeLoyaltyRepository()


@pytest.fixture
def make_repo():
    return FakeLoyaltyRepository
