"""Loyalty vertical configuration.

Builds the ServiceConfig from the patterns module once at import time,
the same way every vertical exposes its config.
"""

from patterns.domain_config import ServiceConfig

# Process-wide configuration instance
config = ServiceConfig.from_env()
