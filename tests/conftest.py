"""Shared test fixtures for tripsync."""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from fakes import FakeAuth, FakeDynamoClient  # noqa: E402

from tripsync.config import _reset_config  # noqa: E402
from tripsync.local.store import LocalStore  # noqa: E402
from tripsync.local.trip_storage import TripStorage  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_config_cache():
    _reset_config()
    yield
    _reset_config()


@pytest.fixture
def trip():
    return {
        "id": "trip-1",
        "tripName": "Algonquin Loop",
        "tripType": "canoe camping",
        "startDate": "2024-07-01",
        "endDate": "2024-07-05",
        "location": "Algonquin Park",
        "isCoordinated": True,
        "groups": [
            {"id": "g1", "name": "Smiths", "size": 4, "color": "#48BB78"},
            {"id": "g2", "name": "Lees", "size": 2, "contactEmail": "lee@example.com", "color": "#ED8936"},
        ],
    }


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def signed_in_auth():
    return FakeAuth("user-a")


@pytest.fixture
async def local_store(tmp_path):
    store = LocalStore(tmp_path / "local.db", retry_delay=0)
    yield store
    await store.close()


@pytest.fixture
def trip_storage(local_store):
    return TripStorage(local_store)


@pytest.fixture
def dynamo_client():
    return FakeDynamoClient()


# PostgreSQL fixtures
@pytest.fixture
def pg_connection():
    """Provide an autocommit PostgreSQL connection for integration tests."""
    import psycopg
    from tripsync.config import get_config

    config = get_config()
    conn = psycopg.connect(
        host=config.postgres_host,
        port=config.postgres_port,
        dbname=config.postgres_database,
        user=config.postgres_user,
        password=config.postgres_password,
        autocommit=True,
    )
    yield conn
    conn.close()


# DynamoDB fixtures
@pytest.fixture
def dynamodb_client():
    """Provide a DynamoDB Local client with the entity tables created."""
    import boto3
    from tripsync.config import get_config
    from tripsync.remote.dynamo import ensure_tables

    config = get_config()
    client = boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )
    ensure_tables(client, "TripSyncTest_")
    return client
