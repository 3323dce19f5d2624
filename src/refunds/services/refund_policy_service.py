"""Refund policy service for calculating refund amounts.

Implements the luxury cancellation policy:
- Full refund, no fees: special circumstances or an override reason
  (vehicle unavailable, weather, force majeure, medical, government).
- Otherwise a tiered refund by item type and hours until the rental starts,
  less the non-refundable fees (5% processing, flat concierge fee,
  10% insurance), floored at zero.

Amounts are ``Decimal`` in major currency units.
"""

import datetime as dt
import math
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal

from refunds.models.refund import BookingSnapshot, RefundCalculation, RefundFees
from refunds.models.refund_policy import (
    DEFAULT_REFUND_POLICY,
    FULL_REFUND_POLICY_LABEL,
    RefundPolicy,
)

SECONDS_PER_HOUR = 3600


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def hours_between(start: dt.datetime, now: dt.datetime) -> float:
    """Hours from ``now`` until ``start``; negative once the start has passed.

    Naive datetimes are treated as UTC.
    """
    if start.tzinfo is None:
        start = start.replace(tzinfo=dt.UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.UTC)
    return (start - now).total_seconds() / SECONDS_PER_HOUR


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class RefundPolicyService:
    """Service for calculating refund amounts based on cancellation timing.

    The service is a pure function of the booking snapshot, the cancellation
    reason and the current time. The clock is injectable so boundary cases
    (exactly 72h, exactly 24h) are deterministic.
    """

    def __init__(
        self,
        policy: RefundPolicy = DEFAULT_REFUND_POLICY,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.policy = policy
        self._clock = clock

    def calculate_refund(
        self,
        snapshot: BookingSnapshot,
        cancellation_reason: str,
        now: dt.datetime | None = None,
    ) -> RefundCalculation:
        """Calculate refund amount for a cancellation.

        Args:
            snapshot: Booking data derived from the original charge
            cancellation_reason: Reason category given by the customer
            now: Time of cancellation; defaults to the service clock

        Returns:
            RefundCalculation with refund amount and policy details
        """
        if snapshot.special_circumstances or self.policy.is_full_refund_reason(
            cancellation_reason
        ):
            return self._full_refund(snapshot)

        now = now or self._clock()
        hours_until_start = hours_between(snapshot.start_date_time, now)

        # Bucket on the unrounded hours so 71.9h never counts as 72h+
        tier = self.policy.match_tier(snapshot.item_type, hours_until_start)
        percentage = tier.refund_fraction

        fees = self.calculate_fees(snapshot.original_amount)
        gross_refund = snapshot.original_amount * percentage
        refund_amount = max(Decimal("0"), gross_refund - fees.total)

        return RefundCalculation(
            refund_amount=refund_amount,
            refund_percentage=percentage,
            gross_refund=gross_refund,
            fees=fees,
            hours_until_start=round_half_up(hours_until_start),
            policy_applied=tier.label,
            policy_version=self.policy.version,
            reason=(
                f"{self._format_percent(percentage)}% refund per "
                f"{snapshot.item_type} cancellation policy"
            ),
        )

    def calculate_fees(self, original_amount: Decimal) -> RefundFees:
        """Calculate the non-refundable fees for a booking amount.

        The concierge service fee is flat and does not scale with the amount.
        """
        schedule = self.policy.non_refundable_fees
        processing = original_amount * schedule.processing_fee_fraction
        concierge = schedule.concierge_service_flat_fee
        insurance = original_amount * schedule.insurance_fee_fraction
        return RefundFees(
            processing=processing,
            concierge_service=concierge,
            insurance=insurance,
            total=processing + concierge + insurance,
        )

    def get_policy_description(self, item_type: str | None = None) -> str:
        return self.policy.describe(item_type)

    def _full_refund(self, snapshot: BookingSnapshot) -> RefundCalculation:
        return RefundCalculation(
            refund_amount=snapshot.original_amount,
            refund_percentage=Decimal("1.0"),
            policy_applied=FULL_REFUND_POLICY_LABEL,
            policy_version=self.policy.version,
            reason="Full refund due to special circumstances",
        )

    @staticmethod
    def _format_percent(fraction: Decimal) -> str:
        return str((fraction * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
