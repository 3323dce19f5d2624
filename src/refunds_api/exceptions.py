"""FastAPI exception handlers for the refund API.

The refund endpoint converts its own failures to responses; this handler is
the safety net for anything raised outside it, so clients never see a stack
trace or an internal error body.

Usage:
    from refunds_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from refunds.services.refund_handler import CORS_HEADERS, FAILURE_ERROR, FAILURE_MESSAGE

logger = logging.getLogger(__name__)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with the fixed customer-facing error.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The uncaught exception

    Returns:
        JSONResponse with 500 status and the concierge escalation message.
    """
    logger.exception("Unhandled exception: %s", exc)

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": FAILURE_ERROR, "message": FAILURE_MESSAGE},
        headers=CORS_HEADERS,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(Exception, generic_exception_handler)
