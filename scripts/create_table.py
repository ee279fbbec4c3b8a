#!/usr/bin/env python3
"""
Create the receipts table for local development.
Honours the same environment variables as the Lambda function
(RECEIPTS_TABLE, USE_LOCALSTACK, LOCALSTACK_ENDPOINT, AWS_REGION).
"""

import os
import sys

import boto3
from botocore.exceptions import ClientError

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.config import Settings


def create_receipts_table(dynamodb, table_name):
    """Create the receipts table keyed by receipt id."""
    print(f"Creating table {table_name}...")

    try:
        table = dynamodb.create_table(
            TableName=table_name,
            KeySchema=[
                {'AttributeName': 'id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'id', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceInUseException':
            print(f"Table {table_name} already exists")
            return dynamodb.Table(table_name)
        raise

    table.wait_until_exists()
    print(f"Created table {table_name}")
    return table


def main():
    """Main function."""
    settings = Settings.from_env()

    kwargs = {'region_name': settings.region_name}
    if settings.endpoint_url:
        kwargs['endpoint_url'] = settings.endpoint_url

    dynamodb = boto3.resource('dynamodb', **kwargs)
    create_receipts_table(dynamodb, settings.receipts_table)


if __name__ == '__main__':
    main()
