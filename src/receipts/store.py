"""Receipt persistence on top of the DynamoDB key-value table."""

import logging

from pydantic import ValidationError as PydanticValidationError

from shared.dynamodb import DynamoDBClient
from shared.exceptions import NotFoundError, StoreUnavailableError
from receipts.models import StoredReceipt

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = 'id'


class ReceiptStore:
    """Write-once, read-many access to receipts by identifier."""

    def __init__(self, table: DynamoDBClient):
        self.table = table

    def store(self, receipt_id: str, receipt: StoredReceipt) -> None:
        """
        Persist a scored receipt under its identifier.

        Existing items with the same identifier are overwritten. No TTL is set.

        Args:
            receipt_id: Identifier used as the item key
            receipt: Receipt with id and points assigned

        Raises:
            StoreUnavailableError: If the write fails
        """
        item = receipt.to_item()
        item[KEY_ATTRIBUTE] = receipt_id
        self.table.put_item(item)

    def fetch(self, receipt_id: str) -> StoredReceipt:
        """
        Read a receipt by identifier.

        Args:
            receipt_id: Receipt identifier

        Returns:
            The stored receipt

        Raises:
            NotFoundError: If no receipt has this identifier
            StoreUnavailableError: If the read fails or the stored data is corrupt
        """
        item = self.table.get_item({KEY_ATTRIBUTE: receipt_id})

        if not item:
            raise NotFoundError("Receipt not found")

        try:
            return StoredReceipt.model_validate(item)
        except PydanticValidationError as e:
            logger.error(f"Stored receipt {receipt_id} is malformed: {e}")
            raise StoreUnavailableError("Stored receipt is malformed")
