from os import environ
from typing import Literal

import boto3
from pydantic import BaseModel, ConfigDict, Field

_cached_clerk_secret: str | None = None


def _resolve_clerk_secret() -> str:
    """Fetch Clerk secret from Secrets Manager at runtime, with caching."""
    global _cached_clerk_secret
    if _cached_clerk_secret is not None:
        return _cached_clerk_secret

    # Local dev: use env var directly
    direct = environ.get("CLERK_SECRET_KEY", "")
    if direct:
        _cached_clerk_secret = direct
        return direct

    arn = environ.get("CLERK_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager", region_name=environ.get("AWS_REGION", "us-east-1"))
    _cached_clerk_secret = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_clerk_secret


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    local_db_path: str
    remote_backend: Literal["dynamodb", "postgres"]
    aws_region: str
    dynamodb_endpoint: str | None = None
    dynamodb_table_prefix: str
    postgres_host: str
    postgres_port: int
    postgres_database: str
    postgres_user: str
    postgres_password: str
    postgres_secret_arn: str | None = None
    max_batch: int = Field(default=450, gt=0, le=500)
    migration_max_attempts: int = Field(default=3, ge=1)
    migration_backoff_seconds: float = Field(default=1.0, ge=0)
    clerk_secret_key: str = ""
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config and Clerk secret. Tests only."""
    global _cached_config, _cached_clerk_secret
    _cached_config = None
    _cached_clerk_secret = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        local_db_path=environ.get("TRIPSYNC_LOCAL_DB_PATH", "~/.tripsync/planmyescape.db"),
        remote_backend=environ.get("TRIPSYNC_REMOTE_BACKEND", "dynamodb"),
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        dynamodb_table_prefix=environ.get("DYNAMODB_TABLE_PREFIX", "TripSync_"),
        postgres_host=environ.get("POSTGRES_HOST", "localhost"),
        postgres_port=int(environ.get("POSTGRES_PORT", "5432")),
        postgres_database=environ.get("POSTGRES_DATABASE", "tripsync"),
        postgres_user=environ.get("POSTGRES_USER", "tripsync"),
        postgres_password=environ.get("POSTGRES_PASSWORD", "localdev"),
        postgres_secret_arn=environ.get("POSTGRES_SECRET_ARN"),
        max_batch=int(environ.get("TRIPSYNC_MAX_BATCH", "450")),
        migration_max_attempts=int(environ.get("MIGRATION_MAX_ATTEMPTS", "3")),
        migration_backoff_seconds=float(environ.get("MIGRATION_BACKOFF_SECONDS", "1.0")),
        clerk_secret_key=_resolve_clerk_secret(),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
