"""Loyalty-specific errors.

Read-time inconsistencies (missing cart, customer or rate table, unreadable
stored balance) fail the request loudly instead of computing an award
against partial data. The transport-level errors from ``core.errors`` are
re-exported so callers can import every error kind from one place.
"""

from core.errors import (
    GraphQLQueryFailed,
    InvalidInput,
    InvalidOperation,
    PlatformRequestFailed,
    ServiceError,
)


class LoyaltyError(ServiceError):
    """Base class for errors raised by the points engine and its reads."""


class CartNotFound(LoyaltyError):
    kind = "CartNotFound"
    status_code = 404


class CustomerNotFound(LoyaltyError):
    kind = "CustomerNotFound"
    status_code = 404


class RateTableNotFound(LoyaltyError):
    kind = "RateTableNotFound"
    status_code = 500


class RateTableMalformed(LoyaltyError):
    kind = "RateTableMalformed"
    status_code = 500


class StoredPointsMalformed(LoyaltyError):
    kind = "StoredPointsMalformed"
    status_code = 500


__all__ = [
    "ServiceError",
    "LoyaltyError",
    "InvalidInput",
    "InvalidOperation",
    "GraphQLQueryFailed",
    "PlatformRequestFailed",
    "CartNotFound",
    "CustomerNotFound",
    "RateTableNotFound",
    "RateTableMalformed",
    "StoredPointsMalformed",
]
