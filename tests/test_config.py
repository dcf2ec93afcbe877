"""Test configuration defaults and environment overrides."""
import dataclasses

import pytest

from patterns.domain_config import LoyaltyConfig, PlatformConfig, ServiceConfig


def test_defaults():
    config = ServiceConfig.default()
    assert config.loyalty.custom_type_key == "tt-loyalty-extension"
    assert config.loyalty.line_item_slug == "bonus-points-earned"
    assert config.loyalty.rate_table_container == "schemas"
    assert config.loyalty.rate_table_key is None
    assert config.log_level == "INFO"


def test_config_is_frozen():
    config = LoyaltyConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.line_item_slug = "other"


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("CTP_PROJECT_KEY", "shop-eu")
    monkeypatch.setenv("CTP_TIMEOUT", "2.5")
    monkeypatch.setenv("LOYALTY_CUSTOM_TYPE_KEY", "loyalty-v2")
    monkeypatch.setenv("LOYALTY_RATE_TABLE_KEY", "tiers-2026")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = ServiceConfig.from_env()
    assert config.platform.project_key == "shop-eu"
    assert config.platform.timeout == 2.5
    assert config.loyalty.custom_type_key == "loyalty-v2"
    assert config.loyalty.rate_table_key == "tiers-2026"
    assert config.cors_origins == ("https://a.test", "https://b.test")
    assert config.log_level == "DEBUG"


def test_empty_env_values_keep_defaults(monkeypatch):
    monkeypatch.setenv("CTP_API_URL", "")
    assert PlatformConfig.from_env().api_url == PlatformConfig().api_url
