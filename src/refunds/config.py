"""Runtime configuration read from environment variables.

Secrets (Stripe keys) are not held here; they are resolved from SSM
Parameter Store by the services that need them, using ``ssm_prefix``.
"""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONCIERGE_MESSAGE = (
    "Thank you for choosing Midas The Lifestyle. "
    "We hope to serve you again in the future."
)


class Settings(BaseModel):
    """Service settings."""

    model_config = ConfigDict(frozen=True)

    environment: str = "dev"
    service_name: str = "process-refund"
    monitoring_webhook_url: str | None = None
    monitoring_timeout_seconds: float = Field(default=2.0, gt=0)
    ses_from_email: str | None = None
    ses_region: str | None = None
    concierge_message: str = DEFAULT_CONCIERGE_MESSAGE
    refund_processing_time: str = "3-5 business days"

    @property
    def ssm_prefix(self) -> str:
        return f"/refunds/{self.environment}"

    @property
    def forwards_to_monitoring(self) -> bool:
        """Only production forwards events to the monitoring webhook."""
        return self.environment == "prod" and bool(self.monitoring_webhook_url)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        env = os.environ
        return cls(
            environment=env.get("ENVIRONMENT", "dev"),
            service_name=env.get("SERVICE_NAME", "process-refund"),
            monitoring_webhook_url=env.get("MONITORING_WEBHOOK_URL") or None,
            ses_from_email=env.get("SES_FROM_EMAIL") or None,
            ses_region=env.get("SES_REGION") or None,
            concierge_message=env.get("CONCIERGE_MESSAGE", DEFAULT_CONCIERGE_MESSAGE),
            refund_processing_time=env.get("REFUND_PROCESSING_TIME", "3-5 business days"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the shared Settings instance.

    Call ``get_settings.cache_clear()`` after changing the environment in tests.
    """
    return Settings.from_env()
