"""Unit tests for the RefundPolicy table model."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from refunds.models.enums import ItemType
from refunds.models.refund_policy import (
    DEFAULT_REFUND_POLICY,
    FLOOR_TIER_LABEL,
    RefundTier,
)


class TestDefaultPolicy:
    """Tests for the published policy table."""

    def test_version(self) -> None:
        assert DEFAULT_REFUND_POLICY.version == "2024-01"

    @pytest.mark.parametrize("item_type", list(ItemType))
    def test_tiers_descend_and_end_with_floor(self, item_type: ItemType) -> None:
        tiers = DEFAULT_REFUND_POLICY.tiers_for(item_type)

        thresholds = [t.min_hours_until_start for t in tiers[:-1]]
        assert thresholds == sorted(thresholds, reverse=True)
        assert tiers[-1].min_hours_until_start is None
        assert tiers[-1].label == FLOOR_TIER_LABEL

    @pytest.mark.parametrize("item_type", list(ItemType))
    def test_fractions_non_increasing(self, item_type: ItemType) -> None:
        fractions = [t.refund_fraction for t in DEFAULT_REFUND_POLICY.tiers_for(item_type)]

        assert fractions == sorted(fractions, reverse=True)
        assert fractions[0] == Decimal("1.00")

    def test_full_refund_reasons(self) -> None:
        assert DEFAULT_REFUND_POLICY.full_refund_reasons == frozenset(
            {
                "vehicle_unavailable",
                "weather_cancellation",
                "force_majeure",
                "medical_emergency",
                "government_restriction",
            }
        )

    def test_policy_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_REFUND_POLICY.version = "2099-01"  # type: ignore[misc]

    def test_tier_fraction_bounds(self) -> None:
        with pytest.raises(ValidationError):
            RefundTier(label="bad", min_hours_until_start=1, refund_fraction=Decimal("1.5"))


class TestTierLookup:
    """Tests for tiers_for and match_tier."""

    @pytest.mark.parametrize("item_type", ["helicopters", "", None, "CARS"])
    def test_unknown_types_use_cars(self, item_type) -> None:
        assert DEFAULT_REFUND_POLICY.tiers_for(item_type) == DEFAULT_REFUND_POLICY.tiers_for(
            ItemType.CARS
        )

    def test_accepts_string_item_type(self) -> None:
        assert DEFAULT_REFUND_POLICY.tiers_for("jets") == DEFAULT_REFUND_POLICY.tiers_for(
            ItemType.JETS
        )

    def test_match_tier_floor_for_negative_hours(self) -> None:
        tier = DEFAULT_REFUND_POLICY.match_tier("jets", -12)

        assert tier.label == "<24h"
        assert tier.refund_fraction == Decimal("0.15")

    def test_match_tier_far_future(self) -> None:
        """Cars have no tier above 72h, so a 400h notice still reports 72h+."""
        assert DEFAULT_REFUND_POLICY.match_tier("cars", 400).label == "72h+"


class TestDescribe:
    """Tests for the human-readable policy description."""

    def test_describe_yachts(self) -> None:
        text = DEFAULT_REFUND_POLICY.describe("yachts")

        assert text.splitlines()[0] == "Cancellation Policy (yachts, v2024-01):"
        assert "• 168+ hours before start: 100% refund" in text
        assert "• Less than 24 hours before start: 20% refund" in text
        assert "5% processing" in text
        assert "10% insurance" in text
        assert "weather_cancellation" in text

    def test_describe_unknown_type_uses_cars(self) -> None:
        assert DEFAULT_REFUND_POLICY.describe("boats").startswith("Cancellation Policy (cars,")
