"""Pytest configuration and fixtures for refund service tests.

This module provides reusable fixtures for testing:
- Environment defaults for moto-backed AWS tests
- A fixed clock for deterministic timing tiers
- Fake payment gateway and notifier collaborators
- A RefundRequestHandler wired to the fakes
"""

import os
from typing import Any, Generator

import pytest

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("ENVIRONMENT", "dev")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from factories import (  # noqa: E402
    FIXED_NOW,
    TEST_REFERENCE_ID,
    FakeNotifier,
    FakePaymentGateway,
    make_charge,
)
from refunds.config import Settings  # noqa: E402
from refunds.models.errors import PaymentGatewayError  # noqa: E402
from refunds.services.refund_handler import RefundRequestHandler  # noqa: E402
from refunds.services.refund_policy_service import RefundPolicyService  # noqa: E402
from refunds.utils.logging import RefundEventLogger  # noqa: E402

# === Fixtures ===


@pytest.fixture(autouse=True)
def reset_service_singletons() -> Generator[None, None, None]:
    """Clear cached services and settings before and after each test."""
    from refunds_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


@pytest.fixture
def fixed_clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def calculator(fixed_clock) -> RefundPolicyService:
    """RefundPolicyService with the default policy and a frozen clock."""
    return RefundPolicyService(clock=fixed_clock)


@pytest.fixture
def gateway() -> FakePaymentGateway:
    """Fake gateway holding one charge for TEST_REFERENCE_ID."""
    fake = FakePaymentGateway()
    fake.charges[TEST_REFERENCE_ID] = make_charge()
    return fake


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def captured_events() -> list[dict[str, Any]]:
    """Structured events emitted during a test."""
    return []


@pytest.fixture
def event_logger(captured_events, fixed_clock) -> RefundEventLogger:
    """Event logger that also appends every record to captured_events."""
    return RefundEventLogger(service="process-refund", sink=captured_events.append, clock=fixed_clock)


@pytest.fixture
def handler(gateway, notifier, event_logger, fixed_clock) -> RefundRequestHandler:
    """RefundRequestHandler wired to fakes and a frozen clock."""
    return RefundRequestHandler(
        gateway=gateway,
        notifier=notifier,
        events=event_logger,
        clock=fixed_clock,
        settings=Settings(),
    )


@pytest.fixture
def failing_gateway_error() -> PaymentGatewayError:
    """Gateway error carrying internal detail that must never reach clients."""
    return PaymentGatewayError(
        "Failed to create refund: charge ch_secret already refunded",
        gateway_error_code="charge_already_refunded",
    )
