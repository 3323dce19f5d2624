"""FastAPI dependency injection providers for shared services.

Factory functions use @lru_cache so each service is built once per process
and reused by every request. Services are lazily instantiated: the Stripe
client and SSM lookups only happen on the first refund.

Usage in routes:
    from refunds_api.dependencies import get_refund_handler

    @router.post("/refund")
    async def refund(handler: RefundRequestHandler = Depends(get_refund_handler)):
        ...

Service Dependency Graph:
    RefundRequestHandler
        ├── StripeService (payment gateway)
        │       └── SSMService
        ├── NotificationService (SES)
        ├── RefundPolicyService (DEFAULT_REFUND_POLICY)
        └── RefundEventLogger
                └── monitoring webhook sink (prod only)

Testing:
    Override get_refund_handler via app.dependency_overrides, and call
    reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from refunds.config import get_settings
from refunds.models.refund_policy import DEFAULT_REFUND_POLICY, RefundPolicy
from refunds.services.notification_service import get_notification_service
from refunds.services.refund_handler import RefundRequestHandler
from refunds.services.refund_policy_service import RefundPolicyService
from refunds.services.ssm_service import get_ssm_service
from refunds.services.stripe_service import get_stripe_service
from refunds.utils.logging import RefundEventLogger, post_to_monitoring_webhook


def get_refund_policy() -> RefundPolicy:
    """Get the active refund policy table."""
    return DEFAULT_REFUND_POLICY


@lru_cache
def get_refund_policy_service() -> RefundPolicyService:
    """Get cached RefundPolicyService instance."""
    return RefundPolicyService(policy=get_refund_policy())


@lru_cache
def get_event_logger() -> RefundEventLogger:
    """Get cached RefundEventLogger.

    Production deployments with MONITORING_WEBHOOK_URL set also forward every
    event to the monitoring webhook.
    """
    settings = get_settings()
    sink = None
    if settings.forwards_to_monitoring and settings.monitoring_webhook_url:
        sink = post_to_monitoring_webhook(
            settings.monitoring_webhook_url, settings.monitoring_timeout_seconds
        )
    return RefundEventLogger(service=settings.service_name, sink=sink)


@lru_cache
def get_refund_handler() -> RefundRequestHandler:
    """Get cached RefundRequestHandler wired to Stripe and SES."""
    return RefundRequestHandler(
        gateway=get_stripe_service(),
        notifier=get_notification_service(),
        calculator=get_refund_policy_service(),
        events=get_event_logger(),
        settings=get_settings(),
    )


def reset_services() -> None:
    """Clear all cached service instances and settings.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    get_refund_policy_service.cache_clear()
    get_event_logger.cache_clear()
    get_refund_handler.cache_clear()
    get_stripe_service.cache_clear()
    get_notification_service.cache_clear()
    get_ssm_service.cache_clear()
    get_settings.cache_clear()
