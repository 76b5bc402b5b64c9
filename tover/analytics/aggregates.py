"""
Shared helpers for turnover reports.
"""

import math
from typing import Iterable, Sequence

from tover.core.models import StoredOrderLine
from tover.utils.batching import chunked
from tover.warehouse.store import Store


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round with halves going up, e.g. 0.125 -> 0.13 at 2 places.

    Uses floor(x * 10^p + 0.5) / 10^p, so it shares binary float
    representation effects with the same formula elsewhere.
    """
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def line_gmv(line: StoredOrderLine) -> float:
    """Gross line value: quantity x unit_price_gross (discount and tax not applied)."""
    return line.quantity * line.unit_price_gross


def collect_order_lines(
    store: Store, order_ids: Sequence[str], chunk_size: int = 100
) -> list[StoredOrderLine]:
    """Fetch the lines of many orders, at most chunk_size ids per query."""
    lines: list[StoredOrderLine] = []
    for chunk in chunked(order_ids, chunk_size):
        lines.extend(store.fetch_order_lines(chunk))
    return lines


def units_sold_by_sku(lines: Iterable[StoredOrderLine]) -> dict[str, int]:
    sold: dict[str, int] = {}
    for line in lines:
        sold[line.sku] = sold.get(line.sku, 0) + line.quantity
    return sold
