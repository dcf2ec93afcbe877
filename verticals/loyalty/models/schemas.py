"""Pydantic schemas for the API Extension request/response bodies."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ResourceType(str, Enum):
    CART = "cart"
    ORDER = "order"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ExtensionResource(BaseModel):
    """Reference to the resource being created or updated.

    ``obj`` holds the full resource as the platform is about to persist it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type_id: str = Field(..., alias="typeId")
    id: Optional[str] = None
    obj: Optional[dict[str, Any]] = None

    def payload(self) -> dict[str, Any]:
        """Resource body with the reference id filled in."""
        body = dict(self.obj or self.model_extra or {})
        if self.id and not body.get("id"):
            body["id"] = self.id
        return body


class ExtensionInput(BaseModel):
    action: str = Field(..., min_length=1)
    resource: ExtensionResource


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ExtensionResponse(BaseModel):
    actions: list[dict[str, Any]] = Field(default_factory=list)


class ErrorItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: list[ErrorItem] = Field(default_factory=list)
