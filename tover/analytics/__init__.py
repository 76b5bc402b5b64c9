"""
Forecasting and turnover reports built on the Store.
"""

from .critical_stock import CriticalStockForecaster, latest_snapshot_per_sku, rank_critical_stock
from .orders import list_orders_with_metrics, order_line_details
from .summary import MetricsSummaryService

__all__ = [
    "CriticalStockForecaster",
    "latest_snapshot_per_sku",
    "rank_critical_stock",
    "MetricsSummaryService",
    "list_orders_with_metrics",
    "order_line_details",
]
