"""
API Extension Registration — route platform lifecycle events to this service.

The platform calls a registered HTTP destination synchronously whenever a
matching resource is created or updated, and applies the update actions it
answers with. Registration is replace-by-key: an extension with the same
key is deleted first, so redeploying with a new URL never leaves two
extensions pointing at different hosts.
"""
from __future__ import annotations
from typing import Any
import logging

from core.integrations.commercetools import CommercetoolsAdapter

log = logging.getLogger("loyalty.extensions")

DEFAULT_EXTENSION_KEY = "loyalty-points-extension"

DEFAULT_TRIGGERS: list[dict[str, Any]] = [
    {"resourceTypeId": "cart", "actions": ["Create", "Update"]},
    {"resourceTypeId": "order", "actions": ["Create"]},
]


def build_extension_draft(
    application_url: str,
    key: str = DEFAULT_EXTENSION_KEY,
    triggers: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Extension draft with an HTTP destination."""
    if not application_url:
        raise ValueError("application_url is required to register an extension")
    return {
        "key": key,
        "destination": {"type": "HTTP", "url": application_url},
        "triggers": triggers if triggers is not None else DEFAULT_TRIGGERS,
    }


async def delete_loyalty_extension(
    client: CommercetoolsAdapter,
    key: str = DEFAULT_EXTENSION_KEY,
) -> bool:
    """Delete the extension registered under ``key``. Returns True if one existed."""
    extensions = await client.query_extensions(key)
    if not extensions:
        log.info("No extension registered under key %s", key)
        return False

    extension = extensions[0]
    await client.delete_extension(key, extension["version"])
    log.info("Deleted extension %s (version %s)", key, extension["version"])
    return True


async def create_loyalty_extension(
    client: CommercetoolsAdapter,
    application_url: str,
    key: str = DEFAULT_EXTENSION_KEY,
    triggers: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Register (or re-register) the loyalty extension at ``application_url``."""
    draft = build_extension_draft(application_url, key=key, triggers=triggers)
    await delete_loyalty_extension(client, key)
    created = await client.create_extension(draft)
    log.info("Registered extension %s -> %s", key, application_url)
    return created
