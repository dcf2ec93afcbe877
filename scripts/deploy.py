"""Register or remove the loyalty API Extension.

Usage::

    CONNECT_SERVICE_URL=https://loyalty.example.com/loyalty/extension \
        python -m scripts.deploy post-deploy
    python -m scripts.deploy pre-undeploy
"""

import argparse
import asyncio
import logging
import sys

from core.integrations.commercetools import CommercetoolsAdapter
from core.integrations.extensions import create_loyalty_extension, delete_loyalty_extension
from core.errors import ServiceError
from core.observability.logging_setup import setup_logging
from patterns.domain_config import ServiceConfig

log = logging.getLogger("loyalty.deploy")


async def post_deploy(config: ServiceConfig) -> None:
    if not config.service_url:
        raise SystemExit("CONNECT_SERVICE_URL must be set for post-deploy")
    client = CommercetoolsAdapter(config.platform)
    await create_loyalty_extension(client, config.service_url, key=config.loyalty.extension_key)


async def pre_undeploy(config: ServiceConfig) -> None:
    client = CommercetoolsAdapter(config.platform)
    await delete_loyalty_extension(client, key=config.loyalty.extension_key)


COMMANDS = {
    "post-deploy": post_deploy,
    "pre-undeploy": pre_undeploy,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args(argv)

    config = ServiceConfig.from_env()
    setup_logging(config.log_level)
    try:
        asyncio.run(COMMANDS[args.command](config))
    except ServiceError as exc:
        log.error("%s failed: %s", args.command, exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
