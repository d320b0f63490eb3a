"""
Unit tests for database credential resolution.
"""

import json

import boto3
import pytest
from botocore.stub import Stubber

from shared.config import HandlerConfig
from shared.errors import FoodsException
from shared.secrets_manager import SecretsManager


SECRET_ARN = "arn:aws:secretsmanager:us-east-2:123456789012:secret:calorie-db-abc123"


@pytest.fixture
def secrets_client():
    return boto3.client(
        "secretsmanager",
        region_name="us-east-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing"
    )


class TestSecretsManager:
    """Test cases for SecretsManager."""

    def test_explicit_credentials_skip_secret_store(self, secrets_client):
        config = HandlerConfig(db_user="app", db_password="pw", db_secret_arn=SECRET_ARN)
        manager = SecretsManager(config, client=secrets_client)

        with Stubber(secrets_client) as stubber:
            credentials = manager.get_database_credentials()
            stubber.assert_no_pending_responses()

        assert credentials == {"username": "app", "password": "pw"}

    def test_resolves_secret_once(self, secrets_client):
        """The secret is fetched once and cached for the process."""
        config = HandlerConfig(db_secret_arn=SECRET_ARN)
        manager = SecretsManager(config, client=secrets_client)

        with Stubber(secrets_client) as stubber:
            stubber.add_response(
                "get_secret_value",
                {"SecretString": json.dumps({"username": "calorie", "password": "s3cret"})},
                {"SecretId": SECRET_ARN}
            )

            first = manager.get_database_credentials()
            second = manager.get_database_credentials()

            stubber.assert_no_pending_responses()

        assert first == {"username": "calorie", "password": "s3cret"}
        assert second is first

    def test_secret_store_error(self, secrets_client):
        config = HandlerConfig(db_secret_arn=SECRET_ARN)
        manager = SecretsManager(config, client=secrets_client)

        with Stubber(secrets_client) as stubber:
            stubber.add_client_error("get_secret_value", service_error_code="ResourceNotFoundException")

            with pytest.raises(FoodsException) as exc_info:
                manager.get_database_credentials()

        assert exc_info.value.code == "SECRET_RESOLUTION_FAILED"

    def test_malformed_secret(self, secrets_client):
        config = HandlerConfig(db_secret_arn=SECRET_ARN)
        manager = SecretsManager(config, client=secrets_client)

        with Stubber(secrets_client) as stubber:
            stubber.add_response("get_secret_value", {"SecretString": "not-json"})

            with pytest.raises(FoodsException) as exc_info:
                manager.get_database_credentials()

        assert exc_info.value.message == "Database secret is malformed"

    def test_no_credentials_configured(self):
        manager = SecretsManager(HandlerConfig(db_user=None, db_password=None, db_secret_arn=None))

        with pytest.raises(FoodsException):
            manager.get_database_credentials()
