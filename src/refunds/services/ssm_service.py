"""Secrets for the refund service, read from SSM Parameter Store.

Secrets live under the environment prefix from ``Settings.ssm_prefix``
(``/refunds/{environment}``); callers ask for names relative to it, such as
``stripe/secret_key``.
"""

import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import ClientError

from refunds.config import Settings, get_settings

logger = logging.getLogger(__name__)

STRIPE_SECRET_KEY = "stripe/secret_key"

# SSM error codes with a dedicated operator-facing message
SSM_ERROR_MESSAGES: dict[str, str] = {
    "ParameterNotFound": "SSM parameter not found: {path}",
    "AccessDeniedException": (
        "Access denied to SSM parameter: {path}. Check IAM permissions for ssm:GetParameter."
    ),
}


class SSMServiceError(Exception):
    """Raised when a secret cannot be read from SSM."""


class SSMService:
    """Reads decrypted SecureString secrets for one environment.

    Values are kept for the lifetime of the instance, so a warm Lambda pays
    for each lookup once.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        region_name: str | None = None,
        client: Any = None,
    ) -> None:
        self._prefix = (settings or get_settings()).ssm_prefix
        self._client = client or boto3.client("ssm", region_name=region_name)
        self._secrets: dict[str, str] = {}

    def parameter_path(self, name: str) -> str:
        """Full SSM path for a secret name relative to the environment prefix."""
        return f"{self._prefix}/{name.lstrip('/')}"

    def get_secret(self, name: str, *, use_cache: bool = True) -> str:
        """Read a secret.

        Args:
            name: Secret name relative to the prefix (e.g. "stripe/secret_key")
            use_cache: Return a previously read value without calling SSM

        Raises:
            SSMServiceError: If the parameter is missing or unreadable.
        """
        path = self.parameter_path(name)
        if use_cache and path in self._secrets:
            return self._secrets[path]

        logger.info("Fetching SSM parameter: %s", path)
        try:
            response = self._client.get_parameter(Name=path, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            template = SSM_ERROR_MESSAGES.get(error_code, "Failed to read SSM parameter {path}: {error}")
            raise SSMServiceError(template.format(path=path, error=e)) from e

        self._secrets[path] = response["Parameter"]["Value"]
        return self._secrets[path]


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService for the configured environment."""
    return SSMService(get_settings())
