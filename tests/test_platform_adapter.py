"""Test the platform adapter: auth, retries, circuit breaker, GraphQL errors."""
import json

import httpx
import pytest

from core.errors import GraphQLQueryFailed, PlatformRequestFailed
from core.integrations.adapter_base import AdapterRequest
from core.integrations.commercetools import CommercetoolsAdapter
from patterns.domain_config import PlatformConfig

CONFIG = PlatformConfig(
    project_key="demo-project",
    client_id="id",
    client_secret="secret",
    scope="manage_project:demo-project",
    api_url="https://api.test",
    auth_url="https://auth.test",
)


class PlatformStub:
    """Records requests; answers tokens and delegates API calls to ``handler``."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []
        self.token_requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "auth.test":
            self.token_requests += 1
            return httpx.Response(
                200, json={"access_token": f"token-{self.token_requests}", "expires_in": 172800}
            )
        self.requests.append(request)
        return self.handler(request)


def make_adapter(handler):
    stub = PlatformStub(handler)
    adapter = CommercetoolsAdapter(CONFIG, transport=httpx.MockTransport(stub))
    adapter.BACKOFF_BASE = 0.0
    return adapter, stub


@pytest.mark.asyncio
async def test_graphql_returns_data_with_bearer_token():
    adapter, stub = make_adapter(lambda r: httpx.Response(200, json={"data": {"cart": {"id": "c"}}}))
    data = await adapter.graphql("query { cart }", {"cartId": "c"})

    assert data == {"cart": {"id": "c"}}
    sent = stub.requests[0]
    assert sent.url.path == "/demo-project/graphql"
    assert sent.headers["Authorization"] == "Bearer token-1"
    assert json.loads(sent.content)["variables"] == {"cartId": "c"}


@pytest.mark.asyncio
async def test_token_is_cached_between_requests():
    adapter, stub = make_adapter(lambda r: httpx.Response(200, json={"data": {}}))
    await adapter.graphql("query { a }")
    await adapter.graphql("query { b }")
    assert stub.token_requests == 1


@pytest.mark.asyncio
async def test_401_refreshes_token_once():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(401, json={"message": "invalid_token"})
        return httpx.Response(200, json={"data": {"ok": True}})

    adapter, stub = make_adapter(handler)
    assert await adapter.graphql("query { ok }") == {"ok": True}
    assert stub.token_requests == 2
    assert stub.requests[-1].headers["Authorization"] == "Bearer token-2"


@pytest.mark.asyncio
async def test_graphql_errors_raise():
    adapter, _ = make_adapter(
        lambda r: httpx.Response(200, json={"data": None, "errors": [{"message": "bad field"}]})
    )
    with pytest.raises(GraphQLQueryFailed, match="bad field"):
        await adapter.graphql("query { nope }")


@pytest.mark.asyncio
async def test_graphql_http_failure_raises():
    adapter, _ = make_adapter(lambda r: httpx.Response(403, json={"message": "forbidden"}))
    with pytest.raises(GraphQLQueryFailed) as exc:
        await adapter.graphql("query { cart }")
    assert exc.value.status_code == 502
    assert exc.value.details["statusCode"] == 403


@pytest.mark.asyncio
async def test_5xx_is_retried_then_succeeds():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] < 3:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json={"data": {"ok": 1}})

    adapter, _ = make_adapter(handler)
    assert await adapter.graphql("query { ok }") == {"ok": 1}
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_transport_errors_exhaust_retries():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    adapter, stub = make_adapter(handler)
    resp = await adapter.request(AdapterRequest(method="GET", path="demo-project/customers"))
    assert resp.status_code == 502
    assert resp.retries == adapter.MAX_RETRIES + 1
    assert "connection refused" in resp.error
    assert adapter.get_health().failed_requests == 1


@pytest.mark.asyncio
async def test_circuit_opens_after_repeated_failures():
    adapter, stub = make_adapter(lambda r: httpx.Response(500, text="boom"))
    adapter.MAX_RETRIES = 0
    adapter.CB_FAILURE_THRESHOLD = 2

    for _ in range(2):
        await adapter.request(AdapterRequest(method="GET", path="x"))
    sent = len(stub.requests)

    resp = await adapter.request(AdapterRequest(method="GET", path="x"))
    assert resp.status_code == 503
    assert len(stub.requests) == sent
    assert adapter.get_health().circuit_state == "open"


@pytest.mark.asyncio
async def test_update_customer_sends_version_and_actions():
    adapter, stub = make_adapter(lambda r: httpx.Response(200, json={"id": "cust-1", "version": 8}))
    actions = [{"action": "setCustomType", "type": {"key": "k", "typeId": "type"}, "fields": {"points": 5}}]
    result = await adapter.update_customer("cust-1", 7, actions)

    assert result["version"] == 8
    sent = stub.requests[0]
    assert sent.method == "POST"
    assert sent.url.path == "/demo-project/customers/cust-1"
    assert json.loads(sent.content) == {"version": 7, "actions": actions}


@pytest.mark.asyncio
async def test_update_customer_conflict_raises():
    adapter, _ = make_adapter(
        lambda r: httpx.Response(409, json={"message": "Object has a different version"})
    )
    with pytest.raises(PlatformRequestFailed) as exc:
        await adapter.update_customer("cust-1", 1, [])
    assert exc.value.details["statusCode"] == 409
