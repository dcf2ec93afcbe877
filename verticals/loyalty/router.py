"""Loyalty API router — API Extension endpoints.

The platform POSTs ``{action, resource}`` for every cart or order
create/update and applies the actions in the response body:
- /extension dispatches on ``resource.typeId`` (cart or order)
- /cart and /order accept only their own resource type
- Repository injection via FastAPI Depends
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from verticals.loyalty.controllers import cart_controller, order_controller
from verticals.loyalty.errors import InvalidInput
from verticals.loyalty.models.schemas import (
    ErrorResponse,
    ExtensionInput,
    ExtensionResponse,
    ResourceType,
)
from verticals.loyalty.repository import LoyaltyRepository, get_loyalty_repository

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid body, resource type or action"},
    404: {"model": ErrorResponse, "description": "Cart or customer not found"},
    500: {"model": ErrorResponse, "description": "Rate table or stored balance unreadable"},
    502: {"model": ErrorResponse, "description": "Platform request failed"},
}


def _parse(body: Any) -> ExtensionInput:
    if not isinstance(body, dict) or not body.get("action") or not body.get("resource"):
        raise InvalidInput("Bad request - Missing body parameters.")
    try:
        return ExtensionInput.model_validate(body)
    except ValidationError as exc:
        raise InvalidInput(
            "Bad request - Invalid body parameters.",
            details={"fields": [".".join(str(p) for p in e["loc"]) for e in exc.errors()]},
        ) from exc


async def _dispatch(
    request: ExtensionInput,
    repo: LoyaltyRepository,
    allowed: tuple[ResourceType, ...],
) -> JSONResponse:
    type_id = request.resource.type_id
    if type_id not in {t.value for t in allowed}:
        expected = " or ".join(t.value for t in allowed)
        raise InvalidInput(
            f"Resource not recognized. Resource type must be {expected}.",
            details={"typeId": type_id},
        )

    controller = cart_controller if type_id == ResourceType.CART.value else order_controller
    result = await controller(request.action, request.resource.payload(), repo)
    return JSONResponse(
        status_code=result.status_code,
        content=ExtensionResponse(actions=result.actions).model_dump(),
    )


# ============================================================================
# Extension Endpoints
# ============================================================================

@router.post(
    "/extension",
    response_model=ExtensionResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
async def handle_extension(
    body: Any = Body(None),
    repo: LoyaltyRepository = Depends(get_loyalty_repository),
):
    """Handle a cart or order lifecycle event."""
    return await _dispatch(_parse(body), repo, (ResourceType.CART, ResourceType.ORDER))


@router.post(
    "/cart",
    response_model=ExtensionResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
async def handle_cart(
    body: Any = Body(None),
    repo: LoyaltyRepository = Depends(get_loyalty_repository),
):
    """Preview the bonus-points award on a cart."""
    return await _dispatch(_parse(body), repo, (ResourceType.CART,))


@router.post(
    "/order",
    response_model=ExtensionResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
)
async def handle_order(
    body: Any = Body(None),
    repo: LoyaltyRepository = Depends(get_loyalty_repository),
):
    """Add a confirmed order's award to the customer's balance."""
    return await _dispatch(_parse(body), repo, (ResourceType.ORDER,))
