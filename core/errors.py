"""Service errors shared by the API layer and the platform integrations.

Each error carries a ``kind`` (the code reported to the caller) and an HTTP
status code. ``api.errors`` turns them into JSON error responses.
"""
from __future__ import annotations
from typing import Any


class ServiceError(Exception):
    """Base class for every error the service reports to its caller."""

    kind: str = "General"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [{"code": self.kind, "message": self.message, **self.details}],
        }


class InvalidInput(ServiceError):
    kind = "InvalidInput"
    status_code = 400


class InvalidOperation(ServiceError):
    kind = "InvalidOperation"
    status_code = 400


class GraphQLQueryFailed(ServiceError):
    kind = "GraphQLQueryFailed"
    status_code = 502


class PlatformRequestFailed(ServiceError):
    kind = "PlatformRequestFailed"
    status_code = 502
