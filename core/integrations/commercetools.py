"""
Commerce Platform Adapter — commercetools HTTP API.

Thin project-scoped wrapper over AdapterBase:
- GraphQL reads (``graphql``)
- Customer updates with optimistic-concurrency versions
- API Extension lookup, creation and deletion

Failures surface as typed ``core.errors`` exceptions; callers never see a
raw AdapterResponse.
"""
from __future__ import annotations
from typing import Any
import json
import logging

import httpx

from core.errors import GraphQLQueryFailed, PlatformRequestFailed
from core.integrations.adapter_base import (
    AdapterBase,
    AdapterRequest,
    AdapterResponse,
    ClientCredentials,
)
from patterns.domain_config import PlatformConfig

log = logging.getLogger("loyalty.platform")


class CommercetoolsAdapter(AdapterBase):
    """Adapter bound to one platform project."""

    name = "commercetools"

    def __init__(
        self,
        config: PlatformConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = config.api_url
        self.project_key = config.project_key
        credentials = ClientCredentials(
            client_id=config.client_id,
            client_secret=config.client_secret,
            token_url=f"{config.auth_url.rstrip('/')}/oauth/token",
            scope=config.scope,
        )
        super().__init__(credentials=credentials, transport=transport, timeout=config.timeout)

    def _path(self, *parts: str) -> str:
        return "/".join([self.project_key, *parts])

    @staticmethod
    def _raise_for(resp: AdapterResponse, operation: str) -> None:
        if resp.ok:
            return
        detail = resp.error or (
            json.dumps(resp.data)[:300] if isinstance(resp.data, (dict, list)) else str(resp.data)[:300]
        )
        raise PlatformRequestFailed(
            f"{operation} failed with HTTP {resp.status_code}: {detail}",
            details={"statusCode": resp.status_code},
        )

    # --- GraphQL ---

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object."""
        resp = await self.request(
            AdapterRequest(
                method="POST",
                path=self._path("graphql"),
                body={"query": query, "variables": variables or {}},
            )
        )
        if not resp.ok:
            raise GraphQLQueryFailed(
                f"GraphQL request failed with HTTP {resp.status_code}: {resp.error or resp.data}",
                details={"statusCode": resp.status_code},
            )

        body = resp.data if isinstance(resp.data, dict) else {}
        log.debug("GraphQL raw response: %s", json.dumps(body, default=str))

        errors = body.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) for e in errors)
            raise GraphQLQueryFailed(f"GraphQL query returned errors: {messages}")
        if "data" not in body or body["data"] is None:
            raise GraphQLQueryFailed("GraphQL response carried no data")
        return body["data"]

    # --- Customers ---

    async def update_customer(
        self,
        customer_id: str,
        version: int,
        actions: list[dict[str, Any]],
    ) -> dict[str, Any]:
        resp = await self.request(
            AdapterRequest(
                method="POST",
                path=self._path("customers", customer_id),
                body={"version": version, "actions": actions},
            )
        )
        self._raise_for(resp, f"Customer {customer_id} update")
        return resp.data

    # --- API Extensions ---

    async def query_extensions(self, key: str) -> list[dict[str, Any]]:
        resp = await self.request(
            AdapterRequest(
                method="GET",
                path=self._path("extensions"),
                params={"where": f'key = "{key}"'},
            )
        )
        self._raise_for(resp, "Extension query")
        return (resp.data or {}).get("results", [])

    async def delete_extension(self, key: str, version: int) -> None:
        resp = await self.request(
            AdapterRequest(
                method="DELETE",
                path=self._path("extensions", f"key={key}"),
                params={"version": version},
            )
        )
        self._raise_for(resp, f"Extension {key} deletion")

    async def create_extension(self, draft: dict[str, Any]) -> dict[str, Any]:
        resp = await self.request(
            AdapterRequest(method="POST", path=self._path("extensions"), body=draft)
        )
        self._raise_for(resp, f"Extension {draft.get('key')} creation")
        return resp.data
