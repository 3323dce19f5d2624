"""Unit tests for SSMService, backed by moto.

Test categories:
- Path resolution under the environment prefix
- Secret retrieval and caching
- Error mapping
- Shared instance wiring
"""

from typing import Generator

import boto3
import pytest
from moto import mock_aws

from refunds.config import Settings
from refunds.services.ssm_service import (
    STRIPE_SECRET_KEY,
    SSMService,
    SSMServiceError,
    get_ssm_service,
)

TEST_REGION = "eu-west-1"
SECRET_PATH = "/refunds/dev/stripe/secret_key"


@pytest.fixture
def ssm() -> Generator:
    """Mocked SSM with the Stripe secret stored as a SecureString."""
    with mock_aws():
        client = boto3.client("ssm", region_name=TEST_REGION)
        client.put_parameter(Name=SECRET_PATH, Value="sk_test_abc", Type="SecureString")
        yield client


@pytest.fixture
def service(ssm) -> SSMService:
    return SSMService(Settings(environment="dev"), region_name=TEST_REGION)


# === Path Resolution ===


class TestParameterPath:
    """Secret names resolve under Settings.ssm_prefix."""

    @pytest.mark.parametrize(
        ("environment", "expected"),
        [
            ("dev", "/refunds/dev/stripe/secret_key"),
            ("prod", "/refunds/prod/stripe/secret_key"),
        ],
    )
    def test_uses_environment_prefix(self, environment, expected) -> None:
        service = SSMService(Settings(environment=environment), client=object())

        assert service.parameter_path(STRIPE_SECRET_KEY) == expected

    def test_leading_slash_ignored(self) -> None:
        service = SSMService(Settings(environment="staging"), client=object())

        assert service.parameter_path("/stripe/secret_key") == "/refunds/staging/stripe/secret_key"


# === Retrieval and Caching ===


class TestGetSecret:
    """Tests for secret retrieval and caching."""

    def test_returns_decrypted_value(self, service) -> None:
        assert service.get_secret(STRIPE_SECRET_KEY) == "sk_test_abc"

    def test_other_environment_does_not_see_dev_secret(self, ssm) -> None:
        service = SSMService(Settings(environment="prod"), region_name=TEST_REGION)

        with pytest.raises(SSMServiceError, match="/refunds/prod/stripe/secret_key"):
            service.get_secret(STRIPE_SECRET_KEY)

    def test_value_is_cached(self, ssm, service) -> None:
        service.get_secret(STRIPE_SECRET_KEY)

        ssm.put_parameter(
            Name=SECRET_PATH, Value="sk_test_rotated", Type="SecureString", Overwrite=True
        )

        assert service.get_secret(STRIPE_SECRET_KEY) == "sk_test_abc"
        assert service.get_secret(STRIPE_SECRET_KEY, use_cache=False) == "sk_test_rotated"
        assert service.get_secret(STRIPE_SECRET_KEY) == "sk_test_rotated"


# === Error Mapping ===


class TestErrors:
    """ClientErrors surface as SSMServiceError."""

    def test_missing_parameter(self, service) -> None:
        with pytest.raises(SSMServiceError, match="SSM parameter not found"):
            service.get_secret("stripe/missing")


# === Shared Instance ===


class TestGetSsmService:
    """get_ssm_service() follows the configured environment."""

    def test_prefix_from_environment_variable(self, ssm, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")

        service = get_ssm_service()

        assert service.parameter_path(STRIPE_SECRET_KEY) == "/refunds/staging/stripe/secret_key"
        assert get_ssm_service() is service
