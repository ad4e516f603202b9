"""Unit tests for configuration management."""

import os
from unittest.mock import MagicMock, patch

import pydantic
import pytest

from tripsync.config import get_config


def test_get_config_with_dynamodb_endpoint():
    """Test that get_config reads DYNAMODB_ENDPOINT when set."""
    with patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "http://localhost:8000"}):
        config = get_config()
        assert config.dynamodb_endpoint == "http://localhost:8000"


def test_get_config_defaults():
    """Test that get_config provides sensible defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = get_config()
        assert config.remote_backend == "dynamodb"
        assert config.aws_region == "us-east-1"
        assert config.dynamodb_table_prefix == "TripSync_"
        assert config.postgres_host == "localhost"
        assert config.postgres_port == 5432
        assert config.max_batch == 450
        assert config.migration_max_attempts == 3
        assert config.migration_backoff_seconds == 1.0
        assert config.clerk_secret_key == ""
        assert config.environment == "local"
        assert config.dynamodb_endpoint is None


def test_get_config_is_cached():
    with patch.dict(os.environ, {}, clear=True):
        assert get_config() is get_config()


def test_postgres_port_string_coercion():
    with patch.dict(os.environ, {"POSTGRES_PORT": "5433"}, clear=False):
        config = get_config()
        assert config.postgres_port == 5433
        assert isinstance(config.postgres_port, int)


def test_remote_backend_must_be_known():
    with patch.dict(os.environ, {"TRIPSYNC_REMOTE_BACKEND": "firestore"}, clear=True):
        with pytest.raises(pydantic.ValidationError):
            get_config()


def test_max_batch_capped_below_transaction_limit():
    with patch.dict(os.environ, {"TRIPSYNC_MAX_BATCH": "501"}, clear=True):
        with pytest.raises(pydantic.ValidationError):
            get_config()


def test_clerk_secret_from_env():
    with patch.dict(os.environ, {"CLERK_SECRET_KEY": "sk_test_local"}, clear=True):
        assert get_config().clerk_secret_key == "sk_test_local"


def test_clerk_secret_from_secrets_manager():
    secrets = MagicMock()
    secrets.get_secret_value.return_value = {"SecretString": "sk_live_from_arn"}
    env = {"CLERK_SECRET_ARN": "arn:aws:secretsmanager:us-east-1:123:secret:clerk"}
    with patch.dict(os.environ, env, clear=True), patch("tripsync.config.boto3.client", return_value=secrets):
        config = get_config()

    assert config.clerk_secret_key == "sk_live_from_arn"
    secrets.get_secret_value.assert_called_once_with(SecretId=env["CLERK_SECRET_ARN"])


def test_config_is_immutable():
    with patch.dict(os.environ, {}, clear=True):
        config = get_config()
        with pytest.raises(pydantic.ValidationError):
            config.aws_region = "eu-west-1"  # type: ignore[misc]


def test_dynamo_client_is_cached():
    from tripsync.clients import get_dynamo_client

    get_dynamo_client.cache_clear()
    env = {"DYNAMODB_ENDPOINT": "http://localhost:8000", "AWS_REGION": "ca-central-1"}
    with patch.dict(os.environ, env, clear=True), patch("tripsync.clients.boto3.client") as mock_client:
        assert get_dynamo_client() is get_dynamo_client()

    mock_client.assert_called_once_with("dynamodb", endpoint_url="http://localhost:8000", region_name="ca-central-1")
    get_dynamo_client.cache_clear()
