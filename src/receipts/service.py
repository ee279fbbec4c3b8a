"""Receipt service for scoring, storing and looking up receipts."""

import uuid
import logging
from typing import Any, Callable, Optional

from shared.config import Settings
from shared.dynamodb import DynamoDBClient
from shared.validators import validate_model
from points.calculator import calculate_points
from receipts.models import Receipt, StoredReceipt
from receipts.store import ReceiptStore

logger = logging.getLogger(__name__)


def generate_receipt_id() -> str:
    """Generate an opaque, collision-resistant receipt identifier."""
    return str(uuid.uuid4())


class ReceiptService:
    """Service for processing receipts."""

    def __init__(
        self,
        store: ReceiptStore,
        id_factory: Callable[[], str] = generate_receipt_id
    ):
        """
        Initialize receipt service.

        Args:
            store: Receipt store gateway
            id_factory: Callable returning a fresh receipt identifier
        """
        self.store = store
        self.id_factory = id_factory

    @classmethod
    def from_settings(cls, settings: Settings, resource: Optional[Any] = None) -> 'ReceiptService':
        """Build a service and its DynamoDB client from settings."""
        table = DynamoDBClient(
            settings.receipts_table,
            endpoint_url=settings.endpoint_url,
            region_name=settings.region_name,
            resource=resource
        )
        return cls(ReceiptStore(table))

    def open(self) -> 'ReceiptService':
        """Check that the receipt store is reachable."""
        self.store.table.ping()
        logger.info(f"Connected to receipts table {self.store.table.table_name}")
        return self

    def close(self) -> None:
        """Release the receipt store connection."""
        self.store.table.close()

    def __enter__(self) -> 'ReceiptService':
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def process_receipt(self, payload: Any) -> str:
        """
        Score and store a submitted receipt.

        Args:
            payload: Decoded JSON request body

        Returns:
            The new receipt identifier

        Raises:
            ValidationError: If the payload is not a receipt
            StoreUnavailableError: If the receipt cannot be stored
        """
        receipt = validate_model(Receipt, payload)

        receipt_id = self.id_factory()
        points = calculate_points(receipt)

        self.store.store(receipt_id, StoredReceipt.from_receipt(receipt, receipt_id, points))

        logger.info(f"Stored receipt {receipt_id} with {points} points")
        return receipt_id

    def get_points(self, receipt_id: str) -> int:
        """
        Get the points awarded to a stored receipt.

        Raises:
            NotFoundError: If the receipt does not exist
            StoreUnavailableError: If the store cannot be read
        """
        return self.store.fetch(receipt_id).points
