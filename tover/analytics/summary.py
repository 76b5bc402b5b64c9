"""
Turnover KPI summary for a workspace.
"""

from datetime import datetime, timedelta, timezone

from tover.core.models import MetricsSummary
from tover.observability.logger import get_logger
from tover.warehouse.store import Store

from .aggregates import collect_order_lines, line_gmv, round_half_up

logger = get_logger(__name__)

DEFAULT_WINDOW_DAYS = 30


class MetricsSummaryService:
    """
    Computes GMV, units sold, order count and stock value.

    Sales figures cover non-cancelled orders in [start, end]. Stock value
    is taken from the most recent snapshot date only.
    """

    def __init__(self, store: Store, lookup_batch_size: int = 100):
        self.store = store
        self.lookup_batch_size = lookup_batch_size

    def summarize(
        self,
        workspace_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> MetricsSummary:
        """
        Build the KPI summary.

        Args:
            workspace_id: Workspace to summarize
            start: Window start (default: end - 30 days)
            end: Window end (default: now)
            now: Clock override

        Returns:
            MetricsSummary; stock fields are None without snapshots

        Raises:
            ValueError: If start is after end
        """
        now = now or datetime.now(timezone.utc)
        end = end or now
        start = start or end - timedelta(days=DEFAULT_WINDOW_DAYS)
        if start > end:
            raise ValueError("start must not be after end")

        orders = self.store.fetch_orders_in_range(workspace_id, start, end, exclude_status="cancelled")
        lines = collect_order_lines(self.store, [o.id for o in orders], self.lookup_batch_size)

        gmv = sum(line_gmv(line) for line in lines)
        units = sum(line.quantity for line in lines)

        stock_value = None
        snapshot_date = None
        snapshots = self.store.fetch_snapshots(workspace_id)
        if snapshots:
            snapshot_date = max(s.snapshot_date for s in snapshots)
            stock_value = round_half_up(
                sum(s.on_hand_qty * s.unit_cost for s in snapshots if s.snapshot_date == snapshot_date),
                2,
            )

        logger.info(
            "Summary computed",
            extra={"workspace_id": workspace_id, "orders": len(orders), "lines": len(lines)},
        )
        return MetricsSummary(
            workspace_id=workspace_id,
            start=start,
            end=end,
            gmv_gross=round_half_up(gmv, 2),
            units_sold=units,
            orders_count=len(orders),
            stock_value_cost=stock_value,
            inventory_snapshot_date=snapshot_date,
            computed_at=now,
        )
