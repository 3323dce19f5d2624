"""Standard error codes for the refund service.

Errors fall into two groups:
- Caller errors (validation, unknown charge) that are returned with a
  specific, user-safe message.
- Internal errors (gateway, notification, incomplete booking data) whose
  details are only ever logged.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes for refund processing."""

    VALIDATION_FAILED = "ERR_REFUND_001"
    PAYMENT_NOT_FOUND = "ERR_REFUND_002"
    BOOKING_DATA_INCOMPLETE = "ERR_REFUND_003"
    GATEWAY_ERROR = "ERR_REFUND_004"
    NOTIFICATION_FAILED = "ERR_REFUND_005"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Refund request validation failed",
    ErrorCode.PAYMENT_NOT_FOUND: "Payment intent not found",
    ErrorCode.BOOKING_DATA_INCOMPLETE: "Booking data on the original charge is incomplete",
    ErrorCode.GATEWAY_ERROR: "Payment gateway error occurred",
    ErrorCode.NOTIFICATION_FAILED: "Refund confirmation could not be delivered",
}

# Recovery suggestions for callers and operators
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Correct the request fields and try again",
    ErrorCode.PAYMENT_NOT_FOUND: "Verify the payment reference on the booking",
    ErrorCode.BOOKING_DATA_INCOMPLETE: "Process the refund manually via the concierge team",
    ErrorCode.GATEWAY_ERROR: "Contact the concierge team to complete the refund",
    ErrorCode.NOTIFICATION_FAILED: "Resend the confirmation email manually",
}


class ErrorResponse(BaseModel):
    """Error body returned by the refund endpoint."""

    model_config = ConfigDict(strict=True)

    error: str
    message: Optional[str] = None


class RefundError(Exception):
    """Exception raised by refund operations."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to the endpoint's error body."""
        return ErrorResponse(error=self.message)


class RefundValidationError(RefundError):
    """Raised when the inbound refund request is missing or malformed fields."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.VALIDATION_FAILED, message)


class ChargeNotFoundError(RefundError):
    """Raised when the referenced charge does not exist."""

    def __init__(self, reference_id: str) -> None:
        super().__init__(ErrorCode.PAYMENT_NOT_FOUND)
        self.reference_id = reference_id


class PaymentGatewayError(RefundError):
    """Raised when the payment gateway fails to fetch a charge or refund it."""

    def __init__(self, message: str, gateway_error_code: Optional[str] = None) -> None:
        """Initialize with message and optional gateway error code.

        Args:
            message: Internal error description (never shown to customers).
            gateway_error_code: Gateway-specific error code if available.
        """
        super().__init__(ErrorCode.GATEWAY_ERROR, message)
        self.gateway_error_code = gateway_error_code


class NotificationError(RefundError):
    """Raised when a refund confirmation cannot be dispatched."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.NOTIFICATION_FAILED, message)


# Gateway error codes that indicate a transient failure
GATEWAY_RETRYABLE_ERRORS: set[str] = {
    "processing_error",
    "rate_limit",
    "lock_timeout",
    "api_connection_error",
}


def is_gateway_error_retryable(gateway_error_code: Optional[str]) -> bool:
    """Check if a gateway error is likely transient.

    The refund handler never retries on its own; this is surfaced in logs so
    the concierge team knows whether a manual retry is worth attempting.

    Args:
        gateway_error_code: The gateway error code.

    Returns:
        True if the error may be resolved by retrying.
    """
    return gateway_error_code in GATEWAY_RETRYABLE_ERRORS if gateway_error_code else False
