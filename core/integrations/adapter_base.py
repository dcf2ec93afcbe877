"""
Platform Adapter Framework.

Every outbound API integration inherits from AdapterBase. Provides:
- OAuth2 client-credentials auth with token caching
- Automatic token refresh on 401 (first attempt only)
- Retry with exponential backoff on 5xx and transport errors
- Built-in circuit breaker (closed/open/half_open)
- Health tracking (latency, errors, auth failures)
- Standardized request/response envelope
"""
from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any
import asyncio
import logging
import time

import httpx

log = logging.getLogger("loyalty.adapter")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@dataclass
class ClientCredentials:
    """OAuth2 client-credentials grant settings."""
    client_id: str
    client_secret: str
    token_url: str
    scope: str = ""


@dataclass
class AccessToken:
    access_token: str
    token_type: str = "Bearer"
    expires_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        # Refresh 60s early so a token never expires mid-request
        return datetime.utcnow() >= (self.expires_at - timedelta(seconds=60))


# ---------------------------------------------------------------------------
# Request / Response envelope
# ---------------------------------------------------------------------------

@dataclass
class AdapterRequest:
    """Standardized outbound request."""
    method: str  # GET, POST, DELETE
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0


@dataclass
class AdapterResponse:
    """Standardized inbound response."""
    status_code: int
    data: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    latency_ms: float = 0.0
    adapter_name: str = ""
    error: str | None = None
    retries: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


# ---------------------------------------------------------------------------
# Health tracking
# ---------------------------------------------------------------------------

@dataclass
class IntegrationHealth:
    """Health metrics for an adapter."""
    adapter_name: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    auth_failures: int = 0
    avg_latency_ms: float = 0.0
    circuit_state: str = "closed"
    last_success: datetime | None = None
    last_failure: datetime | None = None
    last_error: str | None = None

    @property
    def error_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.failed_requests / self.total_requests

    def to_dict(self) -> dict[str, Any]:
        return {
            "adapter_name": self.adapter_name,
            "total_requests": self.total_requests,
            "successful": self.successful_requests,
            "failed": self.failed_requests,
            "auth_failures": self.auth_failures,
            "error_rate": round(self.error_rate, 4),
            "avg_latency_ms": round(self.avg_latency_ms, 1),
            "circuit_state": self.circuit_state,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "last_failure": self.last_failure.isoformat() if self.last_failure else None,
        }


# ---------------------------------------------------------------------------
# AdapterBase
# ---------------------------------------------------------------------------

class AdapterBase(ABC):
    """
    Base class for external API adapters.

    Subclasses set:
        name: str      — adapter identifier
        base_url: str  — API root URL
    """

    name: str = ""
    base_url: str = ""

    # Circuit breaker defaults
    CB_FAILURE_THRESHOLD: int = 5
    CB_RECOVERY_TIMEOUT: float = 30.0

    # Retry defaults
    MAX_RETRIES: int = 3
    BACKOFF_BASE: float = 0.5
    BACKOFF_MAX: float = 8.0

    def __init__(
        self,
        credentials: ClientCredentials | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._token: AccessToken | None = None
        self._health = IntegrationHealth(adapter_name=self.name)
        self._latencies: list[float] = []

        # Circuit breaker state
        self._cb_state: str = "closed"
        self._cb_failure_count: int = 0
        self._cb_last_failure: datetime | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    # --- Auth ---

    async def _fetch_token(self, client: httpx.AsyncClient) -> bool:
        """Exchange client credentials for a fresh access token."""
        creds = self.credentials
        if not creds or not creds.client_id:
            return False

        data = {"grant_type": "client_credentials"}
        if creds.scope:
            data["scope"] = creds.scope
        try:
            resp = await client.post(
                creds.token_url,
                data=data,
                auth=(creds.client_id, creds.client_secret),
                timeout=15.0,
            )
        except httpx.HTTPError as exc:
            log.warning("Token request to %s failed: %s", creds.token_url, exc)
            self._health.auth_failures += 1
            return False

        if resp.status_code != 200:
            log.warning("Token request rejected with HTTP %s", resp.status_code)
            self._health.auth_failures += 1
            return False

        payload = resp.json()
        expires_in = payload.get("expires_in", 3600)
        self._token = AccessToken(
            access_token=payload["access_token"],
            token_type=payload.get("token_type", "Bearer"),
            expires_at=datetime.utcnow() + timedelta(seconds=expires_in),
        )
        return True

    async def get_auth_headers(
        self,
        client: httpx.AsyncClient,
        force_refresh: bool = False,
    ) -> dict[str, str]:
        """Bearer header for the cached token, fetching one when needed."""
        if force_refresh or self._token is None or self._token.is_expired:
            if not await self._fetch_token(client):
                return {}
        return {"Authorization": f"Bearer {self._token.access_token}"}

    # --- Circuit breaker ---

    def _check_circuit(self) -> bool:
        """Return True if request should proceed."""
        if self._cb_state == "closed":
            return True
        if self._cb_state == "open":
            if self._cb_last_failure and (
                datetime.utcnow() - self._cb_last_failure
            ).total_seconds() > self.CB_RECOVERY_TIMEOUT:
                self._cb_state = "half_open"
                self._health.circuit_state = "half_open"
                return True
            return False
        # half_open: allow one test request
        return True

    def _record_success(self) -> None:
        self._cb_failure_count = 0
        self._cb_state = "closed"
        self._health.circuit_state = "closed"

    def _record_failure(self) -> None:
        self._cb_failure_count += 1
        self._cb_last_failure = datetime.utcnow()
        if self._cb_failure_count >= self.CB_FAILURE_THRESHOLD:
            self._cb_state = "open"
            self._health.circuit_state = "open"

    # --- Health ---

    def _update_health(self, latency_ms: float, success: bool, error: str | None = None) -> None:
        self._health.total_requests += 1
        self._latencies.append(latency_ms)
        if len(self._latencies) > 1000:
            self._latencies = self._latencies[-500:]

        if success:
            self._health.successful_requests += 1
            self._health.last_success = datetime.utcnow()
            self._record_success()
        else:
            self._health.failed_requests += 1
            self._health.last_failure = datetime.utcnow()
            self._health.last_error = error
            self._record_failure()

        self._health.avg_latency_ms = sum(self._latencies) / len(self._latencies)

    def get_health(self) -> IntegrationHealth:
        return self._health

    # --- Core request ---

    async def request(self, req: AdapterRequest) -> AdapterResponse:
        """
        Execute a request through the adapter pipeline:
        Circuit Breaker → Auth → Retry w/ Backoff → Health
        """
        if not self._check_circuit():
            return AdapterResponse(
                status_code=503,
                error=f"Circuit breaker OPEN for {self.name}",
                adapter_name=self.name,
            )

        url = f"{self.base_url.rstrip('/')}/{req.path.lstrip('/')}"
        last_error: str | None = None
        latency = 0.0
        retries = 0

        async with self._client() as client:
            headers = {**await self.get_auth_headers(client), **req.headers}

            for attempt in range(self.MAX_RETRIES + 1):
                start = time.time()
                try:
                    resp = await client.request(
                        method=req.method,
                        url=url,
                        params=req.params or None,
                        json=req.body,
                        headers=headers,
                        timeout=req.timeout,
                    )
                    latency = (time.time() - start) * 1000

                    # Token revoked or expired early: refresh once
                    if resp.status_code == 401 and attempt == 0 and self.credentials:
                        refreshed = await self.get_auth_headers(client, force_refresh=True)
                        if refreshed:
                            headers.update(refreshed)
                            continue

                    if resp.status_code < 500:
                        self._update_health(latency, resp.status_code < 400)
                        is_json = resp.headers.get("content-type", "").startswith("application/json")
                        return AdapterResponse(
                            status_code=resp.status_code,
                            data=resp.json() if is_json else resp.text,
                            headers=dict(resp.headers),
                            latency_ms=latency,
                            adapter_name=self.name,
                            retries=retries,
                        )

                    # 5xx — retry
                    last_error = f"HTTP {resp.status_code}: {resp.text[:200]}"
                    retries += 1

                except httpx.HTTPError as exc:
                    latency = (time.time() - start) * 1000
                    last_error = str(exc) or exc.__class__.__name__
                    retries += 1

                if attempt < self.MAX_RETRIES:
                    backoff = min(self.BACKOFF_BASE * (2 ** attempt), self.BACKOFF_MAX)
                    log.info(
                        "%s %s failed (%s), retrying in %.1fs",
                        req.method, req.path, last_error, backoff,
                    )
                    await asyncio.sleep(backoff)

        # All retries exhausted
        self._update_health(latency, False, last_error)
        return AdapterResponse(
            status_code=502,
            error=last_error,
            adapter_name=self.name,
            retries=retries,
        )
