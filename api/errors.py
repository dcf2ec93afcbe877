"""Exception handlers — typed service errors to JSON error responses.

Every ServiceError becomes ``{"message", "errors": [{"code", "message"}]}``
with the error's own status code. Anything else is logged with its
traceback and answered with a generic 500 so no internals leak to the
platform.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import InvalidInput, ServiceError

log = logging.getLogger("loyalty.api")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    log.log(level, "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidInput("Bad request - Invalid request body.")
    log.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("%s %s raised an unexpected error", request.method, request.url.path)
    error = ServiceError("Internal server error")
    return JSONResponse(status_code=500, content=error.to_dict())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
