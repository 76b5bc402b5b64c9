"""
Output models for forecasting and KPI reports.

All of them serialize with camelCase keys for the presentation layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class CriticalStockItem(BaseModel):
    """
    A SKU projected to run out within the forecast horizon.

    Attributes:
        sku: Stock keeping unit
        on_hand_qty: Quantity on the latest snapshot
        avg_units_per_day: Recent velocity (2 decimals)
        days_remaining: on_hand_qty / avg_units_per_day (1 decimal)
    """

    sku: str
    on_hand_qty: float = Field(..., alias="onHandQty")
    avg_units_per_day: float = Field(..., ge=0, alias="avgUnitsPerDay")
    days_remaining: float = Field(..., ge=0, alias="daysRemaining")

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {"sku": "MUG-01", "onHandQty": 12, "avgUnitsPerDay": 3.0, "daysRemaining": 4.0}
        }


class MetricsSummary(BaseModel):
    """Turnover KPIs for a workspace over a time window."""

    workspace_id: str = Field(..., alias="workspaceId")
    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")
    gmv_gross: float = Field(0.0, alias="gmvGross")
    units_sold: int = Field(0, alias="unitsSold")
    orders_count: int = Field(0, alias="ordersCount")
    stock_value_cost: float | None = Field(None, alias="stockValueCost")
    inventory_snapshot_date: date | None = Field(None, alias="inventorySnapshotDate")
    computed_at: datetime = Field(..., alias="computedAt")

    class Config:
        populate_by_name = True


class OrderWithMetrics(BaseModel):
    """Order header with GMV and units aggregated from its lines."""

    id: str
    source: str
    external_order_id: str = Field(..., alias="externalOrderId")
    ordered_at: datetime = Field(..., alias="orderedAt")
    currency: str
    status: str
    order_gmv: float = Field(0.0, alias="orderGmv")
    order_units: int = Field(0, alias="orderUnits")

    class Config:
        populate_by_name = True


class OrderLineDetail(BaseModel):
    """Order line with its computed gross line value."""

    id: str
    sku: str
    quantity: int
    unit_price_gross: float = Field(..., alias="unitPriceGross")
    discount_amount: float = Field(0.0, alias="discountAmount")
    tax_amount: float = Field(0.0, alias="taxAmount")
    line_gmv: float = Field(0.0, alias="lineGmv")

    class Config:
        populate_by_name = True
