"""Request tracing for the refund API.

Every request runs under one correlation ID, taken from the caller's
``X-Correlation-ID`` header, else the Lambda request ID Mangum places in the
ASGI scope, else a fresh UUID. The ID is echoed on the response and stamped
on every structured refund event logged while the request is handled.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from refunds.utils.logging import clear_correlation_id, get_logger, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"

logger = get_logger(__name__)


def lambda_request_id(request: Request) -> str | None:
    """Lambda invocation ID when running behind Mangum, else None."""
    context = request.scope.get("aws.context")
    return getattr(context, "aws_request_id", None) if context is not None else None


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to each request and logs its outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = set_correlation_id(
            request.headers.get(CORRELATION_ID_HEADER) or lambda_request_id(request)
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            logger.info(
                "%s %s -> %d (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            clear_correlation_id()
