"""
Core Integrations — commerce platform access.

Provides the outbound side of the service:
- AdapterBase: HTTP adapter with OAuth2 client credentials, retries, circuit breaker
- CommercetoolsAdapter: GraphQL reads, customer updates, API Extension management
- Extension registration helpers used by the deploy scripts
"""
from core.integrations.adapter_base import (
    AccessToken,
    AdapterBase,
    AdapterRequest,
    AdapterResponse,
    ClientCredentials,
    IntegrationHealth,
)
from core.integrations.commercetools import CommercetoolsAdapter
from core.integrations.extensions import (
    DEFAULT_EXTENSION_KEY,
    build_extension_draft,
    create_loyalty_extension,
    delete_loyalty_extension,
)

__all__ = [
    # Adapter
    "AccessToken",
    "AdapterBase",
    "AdapterRequest",
    "AdapterResponse",
    "ClientCredentials",
    "IntegrationHealth",
    # Platform
    "CommercetoolsAdapter",
    # Extensions
    "DEFAULT_EXTENSION_KEY",
    "build_extension_draft",
    "create_loyalty_extension",
    "delete_loyalty_extension",
]
