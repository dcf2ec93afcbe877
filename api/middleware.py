"""Correlation-id middleware.

The platform sends an X-Correlation-ID header with every extension call.
The id is bound to a ContextVar (see core.observability.logging_setup) so
that every log record written while handling the request carries it,
without passing it through each call.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from api.errors import unhandled_error_handler
from core.observability.logging_setup import bind_correlation_id, unbind_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind the request's correlation id for the duration of the request.

    Priority:
    1. X-Correlation-ID header sent by the platform
    2. A generated uuid4
    The id is echoed back on the response, including the 500 answered for
    an unexpected error, which is logged while the id is still bound.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        token = bind_correlation_id(correlation_id)
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await unhandled_error_handler(request, exc)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            unbind_correlation_id(token)
