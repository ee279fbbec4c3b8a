"""DynamoDB utilities and helper functions."""

from typing import Any, Dict, Optional
from decimal import Decimal
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class DynamoDBClient:
    """DynamoDB table client used as a key-value store."""

    def __init__(
        self,
        table_name: str,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        resource: Optional[Any] = None
    ):
        """
        Initialize DynamoDB client.

        Args:
            table_name: Name of the DynamoDB table
            endpoint_url: Optional endpoint override (LocalStack)
            region_name: Optional AWS region
            resource: Optional pre-built boto3 DynamoDB resource
        """
        self.table_name = table_name

        if resource is None:
            kwargs = {}
            if endpoint_url:
                kwargs['endpoint_url'] = endpoint_url
            if region_name:
                kwargs['region_name'] = region_name
            resource = boto3.resource('dynamodb', **kwargs)

        self.dynamodb = resource
        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put an item in the table, replacing any item with the same key.

        Args:
            item: Item to put

        Returns:
            The item that was put

        Raises:
            StoreUnavailableError: If the operation fails
        """
        try:
            self.table.put_item(Item=item)
            return item
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error putting item: {e}")
            raise StoreUnavailableError(f"Failed to put item: {str(e)}")

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Get an item from the table.

        Args:
            key: Primary key of the item

        Returns:
            The item if found, None otherwise

        Raises:
            StoreUnavailableError: If the operation fails
        """
        try:
            response = self.table.get_item(Key=key)
            item = response.get('Item')
            if item:
                return self._dynamodb_to_python(item)
            return None
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error getting item: {e}")
            raise StoreUnavailableError(f"Failed to get item: {str(e)}")

    def ping(self) -> None:
        """
        Check that the table is reachable.

        Raises:
            StoreUnavailableError: If the table cannot be described
        """
        try:
            self.table.load()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Could not reach table {self.table_name}: {e}")
            raise StoreUnavailableError(f"Could not reach table {self.table_name}: {str(e)}")

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.dynamodb.meta.client.close()

    @staticmethod
    def _dynamodb_to_python(obj: Any) -> Any:
        """Convert DynamoDB objects to Python format."""
        if isinstance(obj, dict):
            return {k: DynamoDBClient._dynamodb_to_python(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DynamoDBClient._dynamodb_to_python(item) for item in obj]
        elif isinstance(obj, Decimal) and obj % 1 == 0:
            return int(obj)
        return obj
