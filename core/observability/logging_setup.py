"""
Logging setup.

Standard-library logging for the whole service:
- One stream handler on the root logger, configured once at startup
- Every record carries the request's correlation id
- Level from LOG_LEVEL (default INFO)
"""
from __future__ import annotations
from contextvars import ContextVar, Token
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"

# Task-safe request state, bound by api.middleware.CorrelationIdMiddleware
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="-")


def get_correlation_id() -> str:
    """Return the correlation id of the current request ("-" outside one)."""
    return _correlation_id.get()


def bind_correlation_id(correlation_id: str) -> Token:
    return _correlation_id.set(correlation_id)


def unbind_correlation_id(token: Token) -> None:
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation id to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the root logger. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if getattr(handler, "_loyalty_handler", False):
            return root

    handler = logging.StreamHandler(sys.stdout)
    handler._loyalty_handler = True
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return root
