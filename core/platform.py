"""Process-wide commerce platform client.

The adapter keeps its access token and circuit-breaker state between
requests, so one instance is shared by the whole process and handed to
routes through the get_platform_client() FastAPI dependency.
"""

from core.integrations.commercetools import CommercetoolsAdapter
from patterns.domain_config import PlatformConfig

_client: CommercetoolsAdapter | None = None


def get_platform_client() -> CommercetoolsAdapter:
    """Return the shared adapter, building it from the environment on first use.

    Usage in FastAPI routes::

        @router.post("/extension")
        async def extension(client: CommercetoolsAdapter = Depends(get_platform_client)):
            data = await client.graphql(QUERY, variables)
    """
    global _client
    if _client is None:
        _client = CommercetoolsAdapter(PlatformConfig.from_env())
    return _client
