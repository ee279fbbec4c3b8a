"""Receipt data models."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, StrictStr


class Item(BaseModel):
    """Receipt line item."""

    model_config = ConfigDict(populate_by_name=True)

    short_description: StrictStr = Field(..., alias="shortDescription", description="Short product description")
    price: StrictStr = Field(..., description="Item price as decimal text")


class Receipt(BaseModel):
    """Receipt submission model."""

    model_config = ConfigDict(populate_by_name=True)

    retailer: StrictStr = Field(..., description="Retailer name")
    purchase_date: StrictStr = Field(..., alias="purchaseDate", description="Purchase date (YYYY-MM-DD)")
    purchase_time: StrictStr = Field(..., alias="purchaseTime", description="Purchase time (HH:MM, 24-hour)")
    total: StrictStr = Field(..., description="Total amount as decimal text")
    items: List[Item] = Field(..., description="Purchased items")


class StoredReceipt(Receipt):
    """Receipt as persisted, with its assigned identifier and points."""

    id: StrictStr
    points: int = Field(..., ge=0)

    @classmethod
    def from_receipt(cls, receipt: Receipt, receipt_id: str, points: int) -> 'StoredReceipt':
        """Attach an identifier and points to a validated receipt."""
        return cls(id=receipt_id, points=points, **receipt.model_dump())

    def to_item(self) -> dict:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(by_alias=True)
