"""
Critical-stock forecasting.

For every SKU on its latest inventory snapshot, estimates a sales velocity
from the recent lookback window and the number of days until stockout.
SKUs projected to run out within the horizon are returned, soonest first.

Usage:
    forecaster = CriticalStockForecaster(store)
    items = forecaster.forecast(workspace_id, n_days=14, lookback_days=7)
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping

from tover.core.models import CriticalStockItem, InventorySnapshotRecord
from tover.observability.logger import get_logger
from tover.observability.metrics import record_forecast
from tover.warehouse.store import Store

from .aggregates import collect_order_lines, round_half_up, units_sold_by_sku

logger = get_logger(__name__)

DEFAULT_HORIZON_DAYS = 14
DEFAULT_LOOKBACK_DAYS = 7
MAX_ITEMS = 50


def latest_snapshot_per_sku(
    snapshots: Iterable[InventorySnapshotRecord],
) -> dict[str, InventorySnapshotRecord]:
    """
    Keep the most recent snapshot of each SKU.

    Ties on snapshot_date keep the first snapshot seen.
    """
    latest: dict[str, InventorySnapshotRecord] = {}
    for snapshot in snapshots:
        current = latest.get(snapshot.sku)
        if current is None or snapshot.snapshot_date > current.snapshot_date:
            latest[snapshot.sku] = snapshot
    return latest


def rank_critical_stock(
    latest: Mapping[str, InventorySnapshotRecord],
    sold: Mapping[str, int],
    n_days: int,
    lookback_days: int,
    max_items: int = MAX_ITEMS,
) -> list[CriticalStockItem]:
    """
    Turn stock levels and units sold into the ranked critical-stock list.

    Args:
        latest: Latest snapshot per SKU
        sold: Units sold per SKU over the lookback window
        n_days: Horizon; SKUs lasting longer are dropped
        lookback_days: Length of the sales window
        max_items: Result cap

    Returns:
        Items sorted by rounded days remaining, then SKU
    """
    divisor = max(lookback_days, 1)
    items: list[CriticalStockItem] = []

    for sku, snapshot in latest.items():
        avg_per_day = sold.get(sku, 0) / divisor
        if avg_per_day <= 0:
            continue

        days_remaining = snapshot.on_hand_qty / avg_per_day
        if days_remaining > n_days:
            continue

        items.append(
            CriticalStockItem(
                sku=sku,
                on_hand_qty=snapshot.on_hand_qty,
                avg_units_per_day=round_half_up(avg_per_day, 2),
                days_remaining=round_half_up(days_remaining, 1),
            )
        )

    items.sort(key=lambda item: (item.days_remaining, item.sku))
    return items[:max_items]


class CriticalStockForecaster:
    """
    Computes the critical-stock list for a workspace from a Store.
    """

    def __init__(self, store: Store, lookup_batch_size: int = 100, max_items: int = MAX_ITEMS):
        """
        Initialize forecaster.

        Args:
            store: Persistence collaborator
            lookup_batch_size: Order ids per order-line fetch
            max_items: Result cap
        """
        self.store = store
        self.lookup_batch_size = lookup_batch_size
        self.max_items = max_items

    @classmethod
    def from_config(cls, store: Store, config) -> "CriticalStockForecaster":
        """Build a forecaster from a ForecastConfig."""
        return cls(store, lookup_batch_size=config.lookup_batch_size, max_items=config.max_items)

    def forecast(
        self,
        workspace_id: str,
        n_days: int = DEFAULT_HORIZON_DAYS,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        now: datetime | None = None,
    ) -> list[CriticalStockItem]:
        """
        Compute the critical-stock list.

        Args:
            workspace_id: Workspace to forecast
            n_days: Horizon in days
            lookback_days: Sales window in days
            now: Clock override (default: current UTC time)

        Returns:
            At most max_items CriticalStockItems, soonest stockout first
        """
        started = time.perf_counter()
        now = now or datetime.now(timezone.utc)

        snapshots = self.store.fetch_snapshots(workspace_id)
        if not snapshots:
            record_forecast(time.perf_counter() - started, 0)
            return []

        latest = latest_snapshot_per_sku(snapshots)

        window_start = now - timedelta(days=lookback_days)
        orders = self.store.fetch_orders_in_range(
            workspace_id, window_start, now, exclude_status="cancelled"
        )
        lines = collect_order_lines(self.store, [o.id for o in orders], self.lookup_batch_size)
        sold = units_sold_by_sku(lines)

        items = rank_critical_stock(latest, sold, n_days, lookback_days, self.max_items)

        duration = time.perf_counter() - started
        record_forecast(duration, len(items))
        logger.info(
            "Critical stock computed",
            extra={
                "workspace_id": workspace_id,
                "skus": len(latest),
                "orders": len(orders),
                "items": len(items),
                "duration_seconds": round(duration, 3),
            },
        )
        return items
