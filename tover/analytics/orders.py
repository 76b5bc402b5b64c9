"""
Order listing and order-line detail reports.
"""

from datetime import datetime, timedelta, timezone

from tover.core.errors import NotFoundError
from tover.core.models import OrderLineDetail, OrderWithMetrics, Page
from tover.warehouse.store import Store

from .aggregates import collect_order_lines, line_gmv, round_half_up

DEFAULT_WINDOW_DAYS = 30


def list_orders_with_metrics(
    store: Store,
    workspace_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 50,
    offset: int = 0,
    lookup_batch_size: int = 100,
) -> Page[OrderWithMetrics]:
    """
    One page of orders, newest first, with GMV and units from their lines.

    The window defaults to the last 30 days.
    """
    end = end or datetime.now(timezone.utc)
    start = start or end - timedelta(days=DEFAULT_WINDOW_DAYS)

    page = store.list_orders(workspace_id, start, end, limit=limit, offset=offset)
    lines = collect_order_lines(store, [o.id for o in page.items], lookup_batch_size)

    totals: dict[str, tuple[float, int]] = {}
    for line in lines:
        gmv, units = totals.get(line.order_id, (0.0, 0))
        totals[line.order_id] = (gmv + line_gmv(line), units + line.quantity)

    items = []
    for order in page.items:
        gmv, units = totals.get(order.id, (0.0, 0))
        items.append(
            OrderWithMetrics(
                id=order.id,
                source=order.source,
                external_order_id=order.external_order_id,
                ordered_at=order.ordered_at,
                currency=order.currency,
                status=order.status,
                order_gmv=round_half_up(gmv, 2),
                order_units=units,
            )
        )
    return Page[OrderWithMetrics](items=items, limit=limit, offset=offset, total=page.total)


def order_line_details(store: Store, order_id: str) -> list[OrderLineDetail]:
    """
    Lines of one order sorted by SKU.

    Raises:
        NotFoundError: If the order does not exist
    """
    if store.get_order(order_id) is None:
        raise NotFoundError("Order", order_id)

    lines = sorted(store.fetch_order_lines([order_id]), key=lambda line: line.sku)
    return [
        OrderLineDetail(
            id=line.id,
            sku=line.sku,
            quantity=line.quantity,
            unit_price_gross=line.unit_price_gross,
            discount_amount=line.discount_amount,
            tax_amount=line.tax_amount,
            line_gmv=round_half_up(line_gmv(line), 2),
        )
        for line in lines
    ]
