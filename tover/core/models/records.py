"""
Typed record models produced by row validation, one per import kind.

Each record remembers the file row it came from (row_number) so later
pipeline stages can report errors against the uploaded file. row_number
is excluded from serialization and never persisted.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

CURRENCY_PATTERN = r"^[A-Z]{3}$"


class OrderRecord(BaseModel):
    """
    Validated order header.

    Natural key: (workspace_id, source, external_order_id)
    """

    source: str = Field(..., min_length=1)
    external_order_id: str = Field(..., min_length=1)
    ordered_at: datetime
    currency: str = Field(..., pattern=CURRENCY_PATTERN)
    status: str = "created"
    row_number: int | None = Field(default=None, exclude=True)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "source": "allegro",
                "external_order_id": "A-1001",
                "ordered_at": "2025-03-01T10:15:00+00:00",
                "currency": "PLN",
                "status": "created",
            }
        }

    @property
    def natural_key(self) -> tuple[str, str]:
        return (self.source, self.external_order_id)


class OrderLineRecord(BaseModel):
    """
    Validated order line.

    Order lines have no natural key of their own; they reference their
    parent order by (source, external_order_id).
    """

    external_order_id: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price_gross: float = Field(..., ge=0)
    discount_amount: float = Field(default=0.0, ge=0)
    tax_amount: float = Field(default=0.0, ge=0)
    row_number: int | None = Field(default=None, exclude=True)

    class Config:
        frozen = True

    @property
    def order_key(self) -> tuple[str, str]:
        return (self.source, self.external_order_id)


class InventorySnapshotRecord(BaseModel):
    """
    On-hand quantity of one SKU on one date.

    Natural key: (workspace_id, snapshot_date, sku)
    """

    snapshot_date: date
    sku: str = Field(..., min_length=1)
    on_hand_qty: float = Field(..., ge=0)
    unit_cost: float = Field(..., ge=0)
    row_number: int | None = Field(default=None, exclude=True)

    class Config:
        frozen = True

    @property
    def natural_key(self) -> tuple[date, str]:
        return (self.snapshot_date, self.sku)


class PaymentRecord(BaseModel):
    """
    Validated payment. Amount sign is unconstrained (refunds are negative).

    Natural key: (workspace_id, source, external_payment_id)
    """

    source: str = Field(..., min_length=1)
    external_payment_id: str = Field(..., min_length=1)
    amount: float
    fee_amount: float = 0.0
    currency: str = Field(..., pattern=CURRENCY_PATTERN)
    paid_at: datetime | None = None
    status: str = "pending"
    row_number: int | None = Field(default=None, exclude=True)

    class Config:
        frozen = True

    @property
    def natural_key(self) -> tuple[str, str]:
        return (self.source, self.external_payment_id)
