"""Request ID middleware for log correlation."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from stackr_ai.telemetry import RequestContext

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every event logged while handling a request with its request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with RequestContext(request_id=request.headers.get(REQUEST_ID_HEADER)) as context:
            request.state.request_id = context.request_id
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = context.request_id
        return response
