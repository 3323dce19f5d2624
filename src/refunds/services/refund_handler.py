"""Refund request handler: validates, calculates and executes a refund.

Business logic for the refund endpoint, kept separate from HTTP routing so
the same pipeline serves the FastAPI route and direct invocation in tests:

    validate -> fetch charge -> calculate -> execute refund -> notify -> respond

Steps run strictly in sequence. The notification is best-effort: once the
gateway has executed the refund the request always succeeds, since there is
no compensating transaction for a money movement that already happened.
"""

import datetime as dt
import json
import re
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Protocol

from pydantic import BaseModel, Field

from refunds.config import Settings, get_settings
from refunds.models.enums import EventSeverity
from refunds.models.errors import (
    ChargeNotFoundError,
    ErrorCode,
    ErrorResponse,
    RefundError,
    RefundValidationError,
)
from refunds.models.refund import (
    BookingSnapshot,
    CancellationRequest,
    ChargeRecord,
    GatewayRefund,
    RefundCalculation,
    RefundNotification,
    RefundResponse,
    RefundSummary,
    from_minor_units,
    to_minor_units,
)
from refunds.services.refund_policy_service import RefundPolicyService, utc_now
from refunds.utils.logging import RefundEventLogger, get_logger

logger = get_logger(__name__)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

REQUIRED_FIELDS = ("paymentReferenceId", "bookingId", "cancellationReason", "customerEmail")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REFUND_REASON_CODE = "requested_by_customer"
PROCESSED_BY = "automated-system"

SUCCESS_MESSAGE = (
    "Your refund has been processed successfully. "
    "You will receive a confirmation email shortly."
)
FAILURE_ERROR = "Refund processing failed"
FAILURE_MESSAGE = (
    "We apologize for the inconvenience. Our VVIP concierge team will process "
    "your refund manually and contact you within 2 hours."
)


class PaymentGateway(Protocol):
    """Payment processor used to look up and refund charges."""

    def retrieve_charge(self, reference_id: str) -> ChargeRecord | None: ...

    def execute_refund(
        self,
        *,
        reference_id: str,
        amount_minor_units: int,
        reason_code: str = ...,
        metadata: dict[str, str] | None = ...,
        idempotency_key: str | None = ...,
    ) -> GatewayRefund: ...


class RefundNotifier(Protocol):
    """Dispatcher for refund confirmations."""

    def send_refund_confirmation(self, notification: RefundNotification) -> Any: ...


class RefundHttpResponse(BaseModel):
    """Transport-neutral HTTP response produced by the handler."""

    status_code: int
    body: dict[str, Any] | None = None
    headers: dict[str, str] = Field(default_factory=lambda: dict(CORS_HEADERS))

    def body_text(self) -> str:
        return "" if self.body is None else json.dumps(self.body)


def format_fraction(fraction: Decimal) -> str:
    """Render a refund fraction without trailing zeros (``1.00`` -> ``1``, ``0.20`` -> ``0.2``)."""
    return format(fraction.normalize(), "f")


def error_context(error: Exception) -> dict[str, str]:
    """Error code and recovery hint for logged failure events."""
    if isinstance(error, RefundError):
        return {"errorCode": error.code.value, "recovery": error.recovery}
    return {}


def parse_start_date(value: str | None) -> dt.datetime:
    """Parse the rental start from charge metadata.

    Accepts ISO 8601 timestamps (with or without offset, ``Z`` allowed) and
    bare dates. Values without an offset are UTC.

    Raises:
        RefundError: If the start date is missing or unparseable.
    """
    if not value:
        raise RefundError(ErrorCode.BOOKING_DATA_INCOMPLETE, "Charge has no start date")
    try:
        parsed = dt.datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise RefundError(
            ErrorCode.BOOKING_DATA_INCOMPLETE, f"Invalid start date: {value!r}"
        ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed


def validate_refund_request(payload: Any) -> CancellationRequest:
    """Validate the inbound request body.

    Raises:
        RefundValidationError: Listing missing fields, or for a malformed email.
    """
    fields: dict[str, Any] = dict(payload) if isinstance(payload, dict) else {}
    if not fields.get("paymentReferenceId") and fields.get("paymentIntentId"):
        fields["paymentReferenceId"] = fields["paymentIntentId"]

    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(fields.get(name), str) or not fields[name]
    ]
    if missing:
        raise RefundValidationError(f"Missing required fields: {', '.join(missing)}")

    if not EMAIL_PATTERN.match(fields["customerEmail"]):
        raise RefundValidationError("Invalid email address")

    return CancellationRequest.model_validate({name: fields[name] for name in REQUIRED_FIELDS})


class RefundRequestHandler:
    """Handles refund requests end to end.

    Collaborators are injected so tests can substitute fakes for the
    payment gateway, notifier, event logger and clock.
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        notifier: RefundNotifier,
        *,
        calculator: RefundPolicyService | None = None,
        events: RefundEventLogger | None = None,
        clock: Callable[[], dt.datetime] = utc_now,
        settings: Settings | None = None,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._calculator = calculator or RefundPolicyService(clock=clock)
        self._settings = settings or get_settings()
        self._events = events or RefundEventLogger(service=self._settings.service_name)
        self._clock = clock

    def handle(self, method: str, body: str | bytes | None) -> RefundHttpResponse:
        """Process one HTTP request to the refund endpoint.

        Args:
            method: HTTP method
            body: Raw request body

        Returns:
            RefundHttpResponse with status, JSON body and CORS headers
        """
        method = method.upper()
        if method == "OPTIONS":
            return RefundHttpResponse(status_code=200)
        if method != "POST":
            return RefundHttpResponse(status_code=405, body={"error": "Method not allowed"})

        reference_id: str | None = None
        try:
            payload = json.loads(body or "")
            if isinstance(payload, dict):
                reference_id = payload.get("paymentReferenceId") or payload.get("paymentIntentId")

            request = validate_refund_request(payload)
            return self.process(request)

        except RefundValidationError as e:
            self._events.log_event(
                "refund_validation_failed", {"error": e.message}, EventSeverity.WARNING
            )
            return RefundHttpResponse(
                status_code=400, body=e.to_error_response().model_dump(exclude_none=True)
            )

        except ChargeNotFoundError as e:
            self._events.log_event(
                "payment_intent_not_found",
                {"paymentReferenceId": e.reference_id},
                EventSeverity.ERROR,
            )
            return RefundHttpResponse(
                status_code=404, body=e.to_error_response().model_dump(exclude_none=True)
            )

        except Exception as e:
            logger.exception("Refund processing failed")
            self._events.log_event(
                "refund_processing_failed",
                {
                    "error": str(e),
                    "errorType": type(e).__name__,
                    "paymentReferenceId": reference_id if isinstance(reference_id, str) else None,
                    **error_context(e),
                },
                EventSeverity.ERROR,
            )
            return RefundHttpResponse(
                status_code=500,
                body=ErrorResponse(error=FAILURE_ERROR, message=FAILURE_MESSAGE).model_dump(),
            )

    def process(self, request: CancellationRequest) -> RefundHttpResponse:
        """Run the refund pipeline for a validated request.

        Once the gateway has executed the refund the result is always a 200;
        failures in the steps after it are logged, never raised.

        Raises:
            ChargeNotFoundError: If the gateway has no such charge.
            RefundError: For incomplete booking data or gateway failures.
        """
        charge = self._gateway.retrieve_charge(request.payment_reference_id)
        if charge is None:
            raise ChargeNotFoundError(request.payment_reference_id)

        snapshot = self.build_snapshot(charge, request)
        calculation = self._calculator.calculate_refund(
            snapshot, request.cancellation_reason, now=self._clock()
        )

        refund = self._gateway.execute_refund(
            reference_id=request.payment_reference_id,
            amount_minor_units=to_minor_units(calculation.refund_amount),
            reason_code=REFUND_REASON_CODE,
            metadata={
                "bookingId": snapshot.booking_id,
                "cancellationReason": request.cancellation_reason,
                "refundPercentage": format_fraction(calculation.refund_percentage),
                "policyApplied": calculation.policy_applied,
                "policyVersion": calculation.policy_version,
                "processedBy": PROCESSED_BY,
            },
            idempotency_key=f"refund_{snapshot.booking_id}",
        )

        # The refund has been executed; nothing below may fail the request.
        try:
            return self._complete(snapshot, request, calculation, refund)
        except Exception as e:
            logger.exception("Post-refund step failed for refund %s", refund.id)
            self._events.log_event(
                "refund_post_processing_failed",
                {
                    "refundId": refund.id,
                    "bookingId": snapshot.booking_id,
                    "error": str(e),
                    "errorType": type(e).__name__,
                },
                EventSeverity.ERROR,
            )
            summary = {
                "id": refund.id,
                "amount": float(calculation.refund_amount),
                "currency": snapshot.currency,
            }
            if refund.status is not None:
                summary["status"] = refund.status
            return RefundHttpResponse(
                status_code=200,
                body={"success": True, "refund": summary, "message": SUCCESS_MESSAGE},
            )

    def _complete(
        self,
        snapshot: BookingSnapshot,
        request: CancellationRequest,
        calculation: RefundCalculation,
        refund: GatewayRefund,
    ) -> RefundHttpResponse:
        """Notify, log and build the success response for an executed refund."""
        self._notify(snapshot, request, calculation, refund)

        self._events.log_event(
            "refund_processed_successfully",
            {
                "refundId": refund.id,
                "paymentReferenceId": request.payment_reference_id,
                "bookingId": snapshot.booking_id,
                "refundAmount": float(calculation.refund_amount),
                "refundPercentage": float(calculation.refund_percentage),
                "policyApplied": calculation.policy_applied,
                "cancellationReason": request.cancellation_reason,
            },
            EventSeverity.INFO,
        )

        response = RefundResponse(
            refund=RefundSummary(
                id=refund.id,
                amount=calculation.refund_amount,
                currency=snapshot.currency,
                status=refund.status,
            ),
            calculation=calculation,
            message=SUCCESS_MESSAGE,
        )
        return RefundHttpResponse(status_code=200, body=response.to_wire())

    def build_snapshot(self, charge: ChargeRecord, request: CancellationRequest) -> BookingSnapshot:
        """Derive booking data from the charge; metadata wins over charge fields."""
        metadata = charge.metadata
        return BookingSnapshot(
            original_amount=from_minor_units(charge.amount),
            currency=charge.currency.upper(),
            item_type=metadata.item_type or "cars",
            item_name=metadata.item_name,
            start_date_time=parse_start_date(metadata.start_date),
            customer_email=metadata.customer_email or charge.receipt_email,
            booking_id=metadata.booking_id or request.booking_id,
            special_circumstances=metadata.special_circumstances,
        )

    def _notify(
        self,
        snapshot: BookingSnapshot,
        request: CancellationRequest,
        calculation: RefundCalculation,
        refund: GatewayRefund,
    ) -> None:
        customer_email = snapshot.customer_email or request.customer_email
        notification = RefundNotification(
            refund_id=refund.id,
            booking_id=snapshot.booking_id,
            item_name=snapshot.item_name,
            original_amount=snapshot.original_amount,
            refund_amount=calculation.refund_amount,
            currency=snapshot.currency,
            customer_email=customer_email,
            cancellation_reason=request.cancellation_reason,
            refund_calculation=calculation,
            processing_time_estimate=self._settings.refund_processing_time,
            message=self._settings.concierge_message,
        )
        try:
            self._notifier.send_refund_confirmation(notification)
        except Exception as e:
            self._events.log_event(
                "refund_email_failed",
                {"refundId": refund.id, "error": str(e), **error_context(e)},
                EventSeverity.ERROR,
            )
            return

        self._events.log_event(
            "refund_email_sent",
            {"refundId": refund.id, "customerEmail": customer_email},
            EventSeverity.INFO,
        )
