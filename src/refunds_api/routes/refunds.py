"""Refund endpoints.

Provides REST endpoints for:
- Processing a cancellation refund (POST /refund, OPTIONS preflight)
- Looking up the cancellation policy for an item type

The refund endpoint keeps the booking frontend's contract: every method is
routed to the handler, which answers preflight, rejects non-POST methods
with 405 and returns ``{"error": ...}`` bodies with CORS headers.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from refunds.models.enums import ItemType
from refunds.models.refund_policy import RefundPolicy
from refunds.services.refund_handler import RefundHttpResponse, RefundRequestHandler
from refunds_api.dependencies import get_refund_handler, get_refund_policy
from refunds_api.models.policy import PolicyResponse

router = APIRouter(tags=["refunds"])

REFUND_METHODS = ["POST", "OPTIONS", "GET", "PUT", "PATCH", "DELETE"]


def _to_response(result: RefundHttpResponse) -> Response:
    if result.body is None:
        return Response(content=b"", status_code=result.status_code, headers=result.headers)
    return JSONResponse(content=result.body, status_code=result.status_code, headers=result.headers)


@router.api_route(
    "/refund",
    methods=REFUND_METHODS,
    summary="Process cancellation refund",
    description="""
Cancel a booking and refund the original charge.

The refund amount follows the cancellation policy for the booked item type:
a tiered percentage by hours until the rental starts, less non-refundable
fees. Override reasons (e.g. `weather_cancellation`) refund in full.

**Notes:**
- `paymentIntentId` is accepted as an alias of `paymentReferenceId`
- Amounts are in major currency units
- Failures after validation return a fixed message; the concierge team follows up
""",
    responses={
        200: {"description": "Refund processed"},
        400: {"description": "Missing or malformed request fields"},
        404: {"description": "Payment intent not found"},
        405: {"description": "Method not allowed"},
        500: {"description": "Refund processing failed"},
    },
)
async def process_refund(
    request: Request,
    handler: RefundRequestHandler = Depends(get_refund_handler),
) -> Response:
    """Process a refund request."""
    body = await request.body()
    result = await run_in_threadpool(handler.handle, request.method, body)
    return _to_response(result)


@router.get(
    "/refund/policy/{item_type}",
    summary="Get cancellation policy",
    description="Refund tiers and non-refundable fees for an item type. "
    "Unknown item types use the cars policy.",
    response_model=PolicyResponse,
)
async def get_cancellation_policy(
    item_type: str,
    policy: RefundPolicy = Depends(get_refund_policy),
) -> PolicyResponse:
    """Get the cancellation policy for an item type."""
    return PolicyResponse.from_policy(policy, ItemType.resolve(item_type).value)
