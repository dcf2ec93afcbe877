"""Dataclass-based configuration for the loyalty extension.

Every setting is a field on a frozen dataclass. This gives us:
- Defaults that work against a fresh project
- Immutability (frozen=True prevents accidental mutation per request)
- One place to read environment overrides (``from_env``)

Usage::

    config = ServiceConfig.from_env()
    client = CommercetoolsAdapter(config.platform)
"""

import os
from dataclasses import dataclass, field


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlatformConfig:
    """Commerce platform API credentials and endpoints."""

    project_key: str = ""
    client_id: str = ""
    client_secret: str = ""
    scope: str = ""
    api_url: str = "https://api.europe-west1.gcp.commercetools.com"
    auth_url: str = "https://auth.europe-west1.gcp.commercetools.com"
    timeout: float = 10.0

    @classmethod
    def from_env(cls, prefix: str = "CTP_") -> "PlatformConfig":
        defaults = cls()
        return cls(
            project_key=_env(f"{prefix}PROJECT_KEY", defaults.project_key),
            client_id=_env(f"{prefix}CLIENT_ID", defaults.client_id),
            client_secret=_env(f"{prefix}CLIENT_SECRET", defaults.client_secret),
            scope=_env(f"{prefix}SCOPE", defaults.scope),
            api_url=_env(f"{prefix}API_URL", defaults.api_url),
            auth_url=_env(f"{prefix}AUTH_URL", defaults.auth_url),
            timeout=float(_env(f"{prefix}TIMEOUT", str(defaults.timeout))),
        )


@dataclass(frozen=True)
class LoyaltyConfig:
    """Keys and identifiers the points engine writes to the platform."""

    custom_type_key: str = "tt-loyalty-extension"
    points_field: str = "points"
    line_item_slug: str = "bonus-points-earned"
    tax_category_key: str = "standard-tax"
    rate_table_container: str = "schemas"
    rate_table_key: str | None = None  # None = every object in the container
    extension_key: str = "loyalty-points-extension"

    @classmethod
    def from_env(cls, prefix: str = "LOYALTY_") -> "LoyaltyConfig":
        defaults = cls()
        return cls(
            custom_type_key=_env(f"{prefix}CUSTOM_TYPE_KEY", defaults.custom_type_key),
            points_field=_env(f"{prefix}POINTS_FIELD", defaults.points_field),
            line_item_slug=_env(f"{prefix}LINE_ITEM_SLUG", defaults.line_item_slug),
            tax_category_key=_env(f"{prefix}TAX_CATEGORY_KEY", defaults.tax_category_key),
            rate_table_container=_env(
                f"{prefix}RATE_TABLE_CONTAINER", defaults.rate_table_container
            ),
            rate_table_key=os.getenv(f"{prefix}RATE_TABLE_KEY") or None,
            extension_key=_env(f"{prefix}EXTENSION_KEY", defaults.extension_key),
        )


# ---------------------------------------------------------------------------
# Top-level service config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceConfig:
    """Complete configuration for the loyalty extension service."""

    platform: PlatformConfig = field(default_factory=PlatformConfig)
    loyalty: LoyaltyConfig = field(default_factory=LoyaltyConfig)

    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"
    service_url: str = ""  # public URL the platform calls back

    @classmethod
    def default(cls) -> "ServiceConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Create config from environment variables.

        Example: LOYALTY_CUSTOM_TYPE_KEY=my-loyalty-type
        """
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            platform=PlatformConfig.from_env(),
            loyalty=LoyaltyConfig.from_env(),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else defaults.cors_origins
            ),
            log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
            service_url=_env("CONNECT_SERVICE_URL", defaults.service_url),
        )
