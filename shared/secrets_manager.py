"""
Secrets management for the foods service.
"""

import json
from typing import Dict, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import HandlerConfig
from shared.errors import FoodsException
from shared.logging import get_logger

logger = get_logger("foods.secrets")


class SecretsManager:
    """
    Resolves database credentials for the foods service.

    Explicitly configured credentials win; otherwise the secret named by
    ``db_secret_arn`` is read from AWS Secrets Manager. The resolved value is
    cached for the lifetime of the instance.
    """

    def __init__(self, config: HandlerConfig, client: Any = None):
        """
        Initialize the secrets manager.

        Args:
            config: Handler configuration
            client: Optional pre-built ``secretsmanager`` client
        """
        self.config = config
        self._client = client
        self._cached: Optional[Dict[str, str]] = None

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.session.Session().client(
                service_name="secretsmanager",
                region_name=self.config.aws_region
            )
        return self._client

    def get_secret(self, secret_id: str) -> Dict[str, Any]:
        """
        Fetch and decode a JSON secret.

        Args:
            secret_id: Secret ARN or name

        Returns:
            Decoded secret payload
        """
        try:
            response = self.client.get_secret_value(SecretId=secret_id)
            return json.loads(response["SecretString"])
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to retrieve secret", secret_id=secret_id, error=str(e))
            raise FoodsException(
                "SECRET_RESOLUTION_FAILED",
                "Failed to retrieve database secret",
                details={"secret_id": secret_id}
            )
        except (KeyError, ValueError) as e:
            logger.error("Secret payload is not valid JSON", secret_id=secret_id, error=str(e))
            raise FoodsException(
                "SECRET_RESOLUTION_FAILED",
                "Database secret is malformed",
                details={"secret_id": secret_id}
            )

    def get_database_credentials(self) -> Dict[str, str]:
        """
        Get database credentials.

        Returns:
            Dictionary with ``username`` and ``password``
        """
        if self._cached is not None:
            return self._cached

        if self.config.db_user and self.config.db_password:
            credentials = {
                "username": self.config.db_user,
                "password": self.config.db_password,
            }
        elif self.config.db_secret_arn:
            secret = self.get_secret(self.config.db_secret_arn)
            credentials = {
                "username": secret.get("username", ""),
                "password": secret.get("password", ""),
            }
            logger.info("Resolved database credentials from secret store")
        else:
            raise FoodsException(
                "SECRET_RESOLUTION_FAILED",
                "No database credentials configured"
            )

        self._cached = credentials
        return credentials


# Global secrets manager instance
_secrets_manager: Optional[SecretsManager] = None


def get_secrets_manager(config: HandlerConfig) -> SecretsManager:
    """
    Get the process-wide secrets manager instance.

    Returns:
        SecretsManager instance
    """
    global _secrets_manager
    if _secrets_manager is None:
        _secrets_manager = SecretsManager(config)
    return _secrets_manager
