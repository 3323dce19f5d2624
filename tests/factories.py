"""Test data builders and fake collaborators shared across test suites."""

import datetime as dt
from decimal import Decimal
from typing import Any

from refunds.models.errors import NotificationError
from refunds.models.refund import (
    BookingSnapshot,
    ChargeMetadata,
    ChargeRecord,
    GatewayRefund,
    RefundNotification,
)

# === Test Configuration ===

FIXED_NOW = dt.datetime(2026, 7, 1, 12, 0, tzinfo=dt.UTC)
TEST_REFERENCE_ID = "pi_1234567890"
TEST_BOOKING_ID = "MID-2026-0042"
TEST_EMAIL = "jane.doe@example.com"


def make_snapshot(
    item_type: str = "cars",
    amount: str = "1000",
    hours: float = 80,
    *,
    special_circumstances: bool = False,
    now: dt.datetime = FIXED_NOW,
) -> BookingSnapshot:
    """Build a booking snapshot starting ``hours`` after ``now``."""
    return BookingSnapshot(
        original_amount=Decimal(amount),
        currency="USD",
        item_type=item_type,
        item_name="Rolls-Royce Phantom",
        start_date_time=now + dt.timedelta(hours=hours),
        customer_email=TEST_EMAIL,
        booking_id=TEST_BOOKING_ID,
        special_circumstances=special_circumstances,
    )


def make_charge(
    *,
    amount: int = 100000,
    currency: str = "usd",
    item_type: str | None = "cars",
    hours: float | None = 80,
    booking_id: str | None = TEST_BOOKING_ID,
    customer_email: str | None = TEST_EMAIL,
    receipt_email: str | None = None,
    special_circumstances: bool = False,
) -> ChargeRecord:
    """Build a charge record as the gateway would return it."""
    start = None if hours is None else (FIXED_NOW + dt.timedelta(hours=hours)).isoformat()
    return ChargeRecord(
        amount=amount,
        currency=currency,
        metadata=ChargeMetadata(
            item_type=item_type,
            item_name="Rolls-Royce Phantom",
            start_date=start,
            booking_id=booking_id,
            customer_email=customer_email,
            special_circumstances=special_circumstances,
        ),
        receipt_email=receipt_email,
    )


def refund_body(**overrides: Any) -> dict[str, Any]:
    """Build a valid refund request body."""
    body = {
        "paymentReferenceId": TEST_REFERENCE_ID,
        "bookingId": TEST_BOOKING_ID,
        "cancellationReason": "schedule_conflict",
        "customerEmail": TEST_EMAIL,
    }
    body.update(overrides)
    return {key: value for key, value in body.items() if value is not None}


class FakePaymentGateway:
    """In-memory payment gateway recording refund calls."""

    def __init__(self) -> None:
        self.charges: dict[str, ChargeRecord] = {}
        self.retrieved: list[str] = []
        self.refunds: list[dict[str, Any]] = []
        self.retrieve_error: Exception | None = None
        self.refund_error: Exception | None = None
        self.refund_status: str | None = "succeeded"

    def retrieve_charge(self, reference_id: str) -> ChargeRecord | None:
        self.retrieved.append(reference_id)
        if self.retrieve_error:
            raise self.retrieve_error
        return self.charges.get(reference_id)

    def execute_refund(self, **kwargs: Any) -> GatewayRefund:
        if self.refund_error:
            raise self.refund_error
        self.refunds.append(kwargs)
        return GatewayRefund(id="re_test_123", status=self.refund_status)


class FakeNotifier:
    """Notifier recording confirmations, optionally failing."""

    def __init__(self) -> None:
        self.sent: list[RefundNotification] = []
        self.fail = False

    def send_refund_confirmation(self, notification: RefundNotification) -> str:
        if self.fail:
            raise NotificationError("SES unavailable")
        self.sent.append(notification)
        return "ses-message-1"

