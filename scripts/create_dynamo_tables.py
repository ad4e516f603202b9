#!/usr/bin/env python3
"""Create DynamoDB tables for local development.

Creates one table per tripsync entity (trips, groups and the five child
collections) against DynamoDB Local, using the table prefix from config.

Usage:
    python scripts/create_dynamo_tables.py
"""

import boto3

from tripsync.config import get_config
from tripsync.remote.dynamo import ENTITIES, ensure_tables


def main():
    """Create all DynamoDB tables."""
    config = get_config()

    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    created = set(ensure_tables(dynamodb, config.dynamodb_table_prefix))
    for entity in ENTITIES:
        name = f"{config.dynamodb_table_prefix}{entity}"
        print(f"✓ {'Created' if name in created else 'Already exists:'} {name}")

    print()
    print("✅ All DynamoDB tables ready")


if __name__ == "__main__":
    main()
