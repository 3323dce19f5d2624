"""Stripe payment gateway for retrieving charges and issuing refunds.

Provides integration with Stripe using the v8+ StripeClient pattern.
Retrieves API keys from SSM Parameter Store.
"""

import logging
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from refunds.models.errors import PaymentGatewayError, is_gateway_error_retryable
from refunds.models.refund import ChargeMetadata, ChargeRecord, GatewayRefund

from .ssm_service import STRIPE_SECRET_KEY, SSMService, SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

# Stripe metadata keys written by the booking checkout
METADATA_KEYS = {
    "item_type": "itemType",
    "item_name": "itemName",
    "start_date": "startDate",
    "booking_id": "bookingId",
    "customer_email": "customerEmail",
    "special_circumstances": "specialCircumstances",
}


class StripeService:
    """Payment gateway backed by Stripe PaymentIntents.

    Handles:
    - Charge retrieval (PaymentIntent + booking metadata)
    - Refund execution with booking-derived idempotency keys

    Usage:
        gateway = get_stripe_service()
        charge = gateway.retrieve_charge("pi_3ABC123DEF456")
    """

    def __init__(self, ssm: SSMService | None = None) -> None:
        """Initialize Stripe service with credentials from SSM.

        Args:
            ssm: Secret store for the environment. Defaults to the shared one.
        """
        self._ssm = ssm or get_ssm_service()
        self._client: StripeClient | None = None

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            PaymentGatewayError: If credentials cannot be retrieved.
        """
        if self._client is None:
            try:
                secret_key = self._ssm.get_secret(STRIPE_SECRET_KEY)
                self._client = StripeClient(secret_key)
                logger.info("Stripe client initialized")
            except SSMServiceError as e:
                raise PaymentGatewayError(f"Failed to initialize Stripe client: {e}") from e
        return self._client

    def retrieve_charge(self, reference_id: str) -> ChargeRecord | None:
        """Retrieve the original charge for a PaymentIntent.

        Args:
            reference_id: Stripe PaymentIntent ID (pi_xxx).

        Returns:
            ChargeRecord, or None when Stripe has no such PaymentIntent.

        Raises:
            PaymentGatewayError: If the lookup fails for any other reason.
        """
        client = self._get_client()

        try:
            intent = client.payment_intents.retrieve(reference_id)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing":
                logger.warning("PaymentIntent not found: %s", reference_id[-4:])
                return None
            raise self._gateway_error("Failed to retrieve payment intent", e) from e
        except stripe.StripeError as e:
            raise self._gateway_error("Failed to retrieve payment intent", e) from e

        if intent is None:
            return None

        return ChargeRecord(
            amount=intent.amount,
            currency=str(intent.currency).upper(),
            metadata=self._parse_metadata(intent.metadata),
            receipt_email=intent.receipt_email,
        )

    def execute_refund(
        self,
        *,
        reference_id: str,
        amount_minor_units: int,
        reason_code: str = "requested_by_customer",
        metadata: dict[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> GatewayRefund:
        """Create a refund for a PaymentIntent.

        Args:
            reference_id: Stripe PaymentIntent ID (pi_xxx).
            amount_minor_units: Refund amount in cents.
            reason_code: Stripe refund reason.
            metadata: Booking and policy details stored on the refund.
            idempotency_key: Key preventing double refunds on client retry.

        Returns:
            GatewayRefund with Stripe refund ID and status.

        Raises:
            PaymentGatewayError: If refund creation fails.
        """
        client = self._get_client()

        params: dict[str, Any] = {
            "payment_intent": reference_id,
            "amount": amount_minor_units,
            "reason": reason_code,
        }
        if metadata:
            params["metadata"] = metadata

        options: dict[str, Any] = {}
        if idempotency_key:
            options["idempotency_key"] = idempotency_key

        try:
            logger.info(
                "Creating refund for PaymentIntent ***%s, amount %d cents",
                reference_id[-4:],
                amount_minor_units,
            )
            refund = client.refunds.create(params=params, options=options)
            logger.info("Refund created: %s", refund.id)

            return GatewayRefund(id=refund.id, status=refund.status)

        except stripe.StripeError as e:
            raise self._gateway_error("Failed to create refund", e) from e

    @staticmethod
    def _parse_metadata(raw: Any) -> ChargeMetadata:
        """Map Stripe metadata (string values) to ChargeMetadata."""
        source = dict(raw or {})
        values: dict[str, Any] = {
            field: source[key] for field, key in METADATA_KEYS.items() if source.get(key)
        }
        if "special_circumstances" in values:
            values["special_circumstances"] = (
                str(values["special_circumstances"]).lower() == "true"
            )
        return ChargeMetadata(**values)

    @staticmethod
    def _gateway_error(action: str, error: stripe.StripeError) -> PaymentGatewayError:
        error_code = getattr(error, "code", None)
        logger.error(
            "%s: %s (code: %s, retryable: %s)",
            action,
            str(error),
            error_code,
            is_gateway_error_retryable(error_code),
        )
        return PaymentGatewayError(f"{action}: {error}", gateway_error_code=error_code)


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance."""
    return StripeService()
