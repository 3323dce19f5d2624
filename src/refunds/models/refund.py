"""Refund models: inbound request, booking snapshot, and calculation result.

Money is carried as ``Decimal`` in major currency units (e.g. dollars) and
rendered as JSON numbers. The payment gateway works in minor units (cents);
conversion happens at the gateway boundary via ``to_minor_units``.

Wire format is camelCase to match the booking frontend.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from .enums import ItemType

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to minor units, rounding half-up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    """Convert a minor-unit amount (e.g. cents) to major units."""
    return Decimal(amount) / 100


class CamelModel(BaseModel):
    """Base model serialising fields with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump to the JSON-ready camelCase form, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CancellationRequest(CamelModel):
    """Validated refund request from the booking frontend."""

    payment_reference_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("paymentReferenceId", "paymentIntentId"),
        description="Reference of the original charge (Stripe PaymentIntent ID)",
        examples=["pi_3ABC123DEF456"],
    )
    booking_id: str = Field(..., min_length=1, examples=["MID-2024-0042"])
    cancellation_reason: str = Field(..., min_length=1, examples=["schedule_conflict"])
    customer_email: str = Field(..., min_length=3, examples=["jane.doe@example.com"])


class BookingSnapshot(CamelModel):
    """Booking data derived from the original charge."""

    model_config = ConfigDict(frozen=True)

    original_amount: Money = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    item_type: str = ItemType.CARS.value
    item_name: str | None = None
    start_date_time: dt.datetime
    customer_email: str | None = None
    booking_id: str
    special_circumstances: bool = False


class RefundFees(CamelModel):
    """Non-refundable fees retained on a timing-based refund."""

    model_config = ConfigDict(frozen=True)

    processing: Money = Field(..., ge=0)
    concierge_service: Money = Field(..., ge=0)
    insurance: Money = Field(..., ge=0)
    total: Money = Field(..., ge=0)


class RefundCalculation(CamelModel):
    """Result of a refund calculation; never mutated once produced.

    ``gross_refund``, ``fees`` and ``hours_until_start`` are only present on
    the timing-based path. The full-refund override waives all fees.
    """

    model_config = ConfigDict(frozen=True)

    refund_amount: Money = Field(..., ge=0)
    refund_percentage: Money = Field(..., ge=0, le=1)
    gross_refund: Money | None = None
    fees: RefundFees | None = None
    hours_until_start: int | None = None
    policy_applied: str = Field(..., examples=["72h+", "full_refund_policy"])
    policy_version: str
    reason: str


class ChargeMetadata(CamelModel):
    """Booking metadata stored on the original charge."""

    item_type: str | None = None
    item_name: str | None = None
    start_date: str | None = None
    booking_id: str | None = None
    customer_email: str | None = None
    special_circumstances: bool = False


class ChargeRecord(CamelModel):
    """Original charge as returned by the payment gateway."""

    amount: int = Field(..., ge=0, description="Amount in minor units")
    currency: str
    metadata: ChargeMetadata = Field(default_factory=ChargeMetadata)
    receipt_email: str | None = None


class GatewayRefund(CamelModel):
    """Refund as created by the payment gateway."""

    id: str
    status: str | None = Field(
        default=None, description="Gateway refund status; may be unset on creation"
    )


class RefundSummary(CamelModel):
    """Refund block of the success response."""

    id: str
    amount: Money
    currency: str
    status: str | None = None


class RefundResponse(CamelModel):
    """Success response body of the refund endpoint."""

    success: bool = True
    refund: RefundSummary
    calculation: RefundCalculation
    message: str


class RefundNotification(CamelModel):
    """Refund confirmation payload handed to the notification dispatcher."""

    refund_id: str
    booking_id: str
    item_name: str | None = None
    original_amount: Money
    refund_amount: Money
    currency: str
    customer_email: str
    cancellation_reason: str
    refund_calculation: RefundCalculation
    processing_time_estimate: str
    message: str
