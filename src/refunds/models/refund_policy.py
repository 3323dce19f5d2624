"""Cancellation refund policy table.

A policy is an immutable, versioned value: refund fraction by item type and
hours-until-start bucket, the non-refundable fee schedule, and the reasons
that force a full refund. Changing the policy means publishing a new
``RefundPolicy`` with a new version, never editing one in place, so that
every calculation can record which table it was computed with.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .enums import ItemType

FLOOR_TIER_LABEL = "<24h"
FULL_REFUND_POLICY_LABEL = "full_refund_policy"


class RefundTier(BaseModel):
    """A (minimum hours before start, refund fraction) bucket."""

    model_config = ConfigDict(strict=True, frozen=True)

    label: str = Field(..., examples=["72h+", "<24h"])
    min_hours_until_start: int | None = Field(
        default=None,
        description="Inclusive lower bound in hours; None marks the floor tier",
    )
    refund_fraction: Decimal = Field(..., ge=0, le=1)


class FeeSchedule(BaseModel):
    """Fees retained on every timing-based refund."""

    model_config = ConfigDict(strict=True, frozen=True)

    processing_fee_fraction: Decimal = Field(..., ge=0, le=1)
    concierge_service_flat_fee: Decimal = Field(
        ..., ge=0, description="Flat amount in major currency units"
    )
    insurance_fee_fraction: Decimal = Field(..., ge=0, le=1)


def _tiers(*entries: tuple[int | None, str]) -> tuple[RefundTier, ...]:
    """Build an ordered tier list from (threshold, fraction) pairs."""
    return tuple(
        RefundTier(
            label=f"{hours}h+" if hours is not None else FLOOR_TIER_LABEL,
            min_hours_until_start=hours,
            refund_fraction=Decimal(fraction),
        )
        for hours, fraction in entries
    )


class RefundPolicy(BaseModel):
    """Versioned cancellation refund policy."""

    model_config = ConfigDict(strict=True, frozen=True)

    version: str
    cancellation_policies: dict[ItemType, tuple[RefundTier, ...]]
    non_refundable_fees: FeeSchedule
    full_refund_reasons: frozenset[str]

    def tiers_for(self, item_type: ItemType | str | None) -> tuple[RefundTier, ...]:
        """Get tiers for an item type, highest threshold first.

        Unknown item types use the cars policy.
        """
        resolved = ItemType.resolve(item_type)
        return self.cancellation_policies.get(
            resolved, self.cancellation_policies[ItemType.CARS]
        )

    def match_tier(self, item_type: ItemType | str | None, hours_until_start: float) -> RefundTier:
        """Select the first tier whose threshold the timing meets.

        Negative hours (cancelling after the start) land in the floor tier
        like any other late cancellation.
        """
        tiers = self.tiers_for(item_type)
        for tier in tiers:
            if tier.min_hours_until_start is None:
                continue
            if hours_until_start >= tier.min_hours_until_start:
                return tier
        return tiers[-1]

    def is_full_refund_reason(self, cancellation_reason: str) -> bool:
        return cancellation_reason in self.full_refund_reasons

    def describe(self, item_type: ItemType | str | None) -> str:
        """Get human-readable description of the policy for an item type."""
        resolved = ItemType.resolve(item_type)
        lines = [f"Cancellation Policy ({resolved.value}, v{self.version}):"]
        for tier in self.tiers_for(resolved):
            percent = int(tier.refund_fraction * 100)
            if tier.min_hours_until_start is None:
                lines.append(f"• Less than 24 hours before start: {percent}% refund")
            else:
                lines.append(
                    f"• {tier.min_hours_until_start}+ hours before start: {percent}% refund"
                )
        fees = self.non_refundable_fees
        lines.append(
            f"• Retained on timing-based refunds: "
            f"{int(fees.processing_fee_fraction * 100)}% processing, "
            f"{fees.concierge_service_flat_fee} concierge service fee, "
            f"{int(fees.insurance_fee_fraction * 100)}% insurance"
        )
        lines.append(
            "• Full refund without fees for: " + ", ".join(sorted(self.full_refund_reasons))
        )
        return "\n".join(lines)


DEFAULT_REFUND_POLICY = RefundPolicy(
    version="2024-01",
    cancellation_policies={
        ItemType.CARS: _tiers(
            (72, "1.00"),
            (48, "0.75"),
            (24, "0.50"),
            (None, "0.25"),
        ),
        ItemType.YACHTS: _tiers(
            (168, "1.00"),
            (72, "0.80"),
            (48, "0.60"),
            (24, "0.40"),
            (None, "0.20"),
        ),
        ItemType.JETS: _tiers(
            (168, "1.00"),
            (72, "0.75"),
            (48, "0.50"),
            (24, "0.30"),
            (None, "0.15"),
        ),
        # No distinct 24-48h rate for properties: the 48h+ fraction carries through.
        ItemType.PROPERTIES: _tiers(
            (336, "1.00"),
            (168, "0.85"),
            (72, "0.70"),
            (48, "0.50"),
            (24, "0.50"),
            (None, "0.25"),
        ),
    },
    non_refundable_fees=FeeSchedule(
        processing_fee_fraction=Decimal("0.05"),
        concierge_service_flat_fee=Decimal("100"),
        insurance_fee_fraction=Decimal("0.10"),
    ),
    full_refund_reasons=frozenset(
        {
            "vehicle_unavailable",
            "weather_cancellation",
            "force_majeure",
            "medical_emergency",
            "government_restriction",
        }
    ),
)
