"""Pydantic models for refund processing."""

from .enums import EventSeverity, ItemType
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    GATEWAY_RETRYABLE_ERRORS,
    ChargeNotFoundError,
    ErrorCode,
    ErrorResponse,
    NotificationError,
    PaymentGatewayError,
    RefundError,
    RefundValidationError,
    is_gateway_error_retryable,
)
from .refund import (
    BookingSnapshot,
    CancellationRequest,
    ChargeMetadata,
    ChargeRecord,
    GatewayRefund,
    Money,
    RefundCalculation,
    RefundFees,
    RefundNotification,
    RefundResponse,
    RefundSummary,
    from_minor_units,
    to_minor_units,
)
from .refund_policy import (
    DEFAULT_REFUND_POLICY,
    FLOOR_TIER_LABEL,
    FULL_REFUND_POLICY_LABEL,
    FeeSchedule,
    RefundPolicy,
    RefundTier,
)

__all__ = [
    # Enums
    "EventSeverity",
    "ItemType",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "GATEWAY_RETRYABLE_ERRORS",
    "ChargeNotFoundError",
    "ErrorCode",
    "ErrorResponse",
    "NotificationError",
    "PaymentGatewayError",
    "RefundError",
    "RefundValidationError",
    "is_gateway_error_retryable",
    # Refund
    "BookingSnapshot",
    "CancellationRequest",
    "ChargeMetadata",
    "ChargeRecord",
    "GatewayRefund",
    "Money",
    "RefundCalculation",
    "RefundFees",
    "RefundNotification",
    "RefundResponse",
    "RefundSummary",
    "from_minor_units",
    "to_minor_units",
    # Policy
    "DEFAULT_REFUND_POLICY",
    "FLOOR_TIER_LABEL",
    "FULL_REFUND_POLICY_LABEL",
    "FeeSchedule",
    "RefundPolicy",
    "RefundTier",
]
