"""
Models for rows read back from the store.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UpsertResult(BaseModel):
    """Rows created vs. updated in place by an upsert."""

    created: int = Field(0, ge=0)
    updated: int = Field(0, ge=0)

    @property
    def affected(self) -> int:
        return self.created + self.updated

    def __add__(self, other: "UpsertResult") -> "UpsertResult":
        return UpsertResult(created=self.created + other.created, updated=self.updated + other.updated)


class StoredOrder(BaseModel):
    """Persisted order header."""

    id: str
    workspace_id: str
    source: str
    external_order_id: str
    ordered_at: datetime
    currency: str
    status: str


class StoredOrderLine(BaseModel):
    """Persisted order line."""

    id: str
    order_id: str
    sku: str
    quantity: int
    unit_price_gross: float
    discount_amount: float = 0.0
    tax_amount: float = 0.0
