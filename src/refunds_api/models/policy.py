"""API models for the refund policy endpoint."""

from pydantic import BaseModel, ConfigDict, Field

from refunds.models.refund import Money
from refunds.models.refund_policy import RefundPolicy


class TierView(BaseModel):
    """A single refund tier as shown to customers."""

    model_config = ConfigDict(populate_by_name=True)

    label: str = Field(..., examples=["72h+"])
    min_hours_until_start: int | None = Field(default=None, serialization_alias="minHoursUntilStart")
    refund_percentage: Money = Field(..., serialization_alias="refundPercentage")


class FeeScheduleView(BaseModel):
    """Non-refundable fees as shown to customers."""

    model_config = ConfigDict(populate_by_name=True)

    processing_fee_fraction: Money = Field(..., serialization_alias="processingFeeFraction")
    concierge_service_flat_fee: Money = Field(..., serialization_alias="conciergeServiceFlatFee")
    insurance_fee_fraction: Money = Field(..., serialization_alias="insuranceFeeFraction")


class PolicyResponse(BaseModel):
    """Cancellation policy for one item type."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "itemType": "yachts",
                    "policyVersion": "2024-01",
                    "tiers": [{"label": "168h+", "minHoursUntilStart": 168, "refundPercentage": 1.0}],
                }
            ]
        },
    )

    item_type: str = Field(..., serialization_alias="itemType")
    policy_version: str = Field(..., serialization_alias="policyVersion")
    tiers: list[TierView]
    fees: FeeScheduleView
    full_refund_reasons: list[str] = Field(..., serialization_alias="fullRefundReasons")
    description: str

    @classmethod
    def from_policy(cls, policy: RefundPolicy, item_type: str) -> "PolicyResponse":
        """Build the response for an item type from a policy table."""
        fees = policy.non_refundable_fees
        return cls(
            item_type=item_type,
            policy_version=policy.version,
            tiers=[
                TierView(
                    label=tier.label,
                    min_hours_until_start=tier.min_hours_until_start,
                    refund_percentage=tier.refund_fraction,
                )
                for tier in policy.tiers_for(item_type)
            ],
            fees=FeeScheduleView(
                processing_fee_fraction=fees.processing_fee_fraction,
                concierge_service_flat_fee=fees.concierge_service_flat_fee,
                insurance_fee_fraction=fees.insurance_fee_fraction,
            ),
            full_refund_reasons=sorted(policy.full_refund_reasons),
            description=policy.describe(item_type),
        )
