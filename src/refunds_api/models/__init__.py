"""API request/response models."""

from refunds_api.models.policy import FeeScheduleView, PolicyResponse, TierView

__all__ = ["FeeScheduleView", "PolicyResponse", "TierView"]
