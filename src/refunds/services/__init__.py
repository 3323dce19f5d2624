"""Backend services for refund processing."""

from .notification_service import NotificationService, get_notification_service
from .refund_handler import (
    CORS_HEADERS,
    PaymentGateway,
    RefundHttpResponse,
    RefundNotifier,
    RefundRequestHandler,
    validate_refund_request,
)
from .refund_policy_service import RefundPolicyService
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import StripeService, get_stripe_service

__all__ = [
    "CORS_HEADERS",
    "NotificationService",
    "PaymentGateway",
    "RefundHttpResponse",
    "RefundNotifier",
    "RefundPolicyService",
    "RefundRequestHandler",
    "SSMService",
    "SSMServiceError",
    "StripeService",
    "get_notification_service",
    "get_ssm_service",
    "get_stripe_service",
    "validate_refund_request",
]
