"""
Admin CLI for tover.

Usage:
    tover-admin init-db
    tover-admin imports --workspace <workspace_id> [--limit N] [--offset N]
    tover-admin import-show --import-id <id>
    tover-admin import-errors --import-id <id> [--limit N] [--offset N]
    tover-admin critical-stock --workspace <workspace_id> [--days N] [--lookback N]
    tover-admin summary --workspace <workspace_id> [--from TS] [--to TS]
    tover-admin orders --workspace <workspace_id> [--from TS] [--to TS] [--limit N]
    tover-admin order-lines --order-id <id>
"""

import argparse
import sys
from datetime import datetime

from tover.analytics import (
    CriticalStockForecaster,
    MetricsSummaryService,
    list_orders_with_metrics,
    order_line_details,
)
from tover.core.errors import NotFoundError, PersistenceError
from tover.observability.logger import get_logger
from tover.utils.validation import ValidationError, validate_days, validate_limit, validate_offset
from tover.warehouse.postgres_store import PostgresStore
from tover.warehouse.schema_mgmt import SchemaManager

from .common import (
    add_common_arguments,
    open_pool,
    parse_timestamp,
    print_json,
    resolve_config,
    workspace_from,
)

logger = get_logger(__name__)


def format_timestamp(ts: datetime | str | None) -> str:
    """Format timestamp for display."""
    if ts is None:
        return "N/A"
    if isinstance(ts, str):
        return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def init_db_command(args, config, pool) -> None:
    """Create the tover tables."""
    manager = SchemaManager(pool)
    manager.create_tables()
    print(f"Tables ready: {', '.join(manager.existing_tables())}")


def imports_command(args, config, pool) -> None:
    """List recent imports of a workspace."""
    store = PostgresStore(pool)
    page = store.list_imports(
        workspace_from(args, config), limit=validate_limit(args.limit), offset=validate_offset(args.offset)
    )
    if args.json:
        print_json(page.model_dump(mode="json"))
        return

    if not page.items:
        print("\nNo imports found.")
        return

    print(f"\n{'=' * 100}")
    print(f"IMPORTS ({page.total} total)")
    print(f"{'=' * 100}\n")
    print(f"{'Import ID':<38} {'Type':<17} {'Status':<11} {'Created':<20} {'Summary'}")
    print(f"{'-' * 100}")
    for record in page.items:
        print(
            f"{record.id:<38} {record.import_type.value:<17} {record.status.value:<11} "
            f"{format_timestamp(record.created_at):<20} {record.summary}"
        )
    print()


def import_show_command(args, config, pool) -> None:
    """Show one import."""
    record = PostgresStore(pool).get_import(args.import_id)
    if record is None:
        raise NotFoundError("Import", args.import_id)
    print_json(record.model_dump(mode="json"))


def import_errors_command(args, config, pool) -> None:
    """List an import's error log, by row number."""
    store = PostgresStore(pool)
    if store.get_import(args.import_id) is None:
        raise NotFoundError("Import", args.import_id)

    page = store.list_import_errors(
        args.import_id, limit=validate_limit(args.limit), offset=validate_offset(args.offset)
    )
    if args.json:
        print_json(page.model_dump(mode="json"))
        return

    print(f"\n{'=' * 100}")
    print(f"IMPORT ERRORS: {args.import_id} ({page.total} total)")
    print(f"{'=' * 100}\n")
    print(f"{'Row':>6}  {'Code':<17} {'Detail'}")
    print(f"{'-' * 100}")
    for entry in page.items:
        print(f"{entry.row_number:>6}  {entry.error_code.value:<17} {entry.error_detail}")
    print()


def critical_stock_command(args, config, pool) -> None:
    """Show SKUs projected to run out within the horizon."""
    days = config.forecast.horizon_days if args.days is None else args.days
    lookback = config.forecast.lookback_days if args.lookback is None else args.lookback

    forecaster = CriticalStockForecaster.from_config(PostgresStore(pool), config.forecast)
    items = forecaster.forecast(
        workspace_from(args, config),
        n_days=validate_days(days, "days"),
        lookback_days=validate_days(lookback, "lookback"),
    )
    if args.json:
        print_json({"items": [i.model_dump(by_alias=True) for i in items]})
        return

    if not items:
        print("\nNo SKUs at risk of running out.")
        return

    print(f"\n{'SKU':<30} {'On hand':>10} {'Avg/day':>10} {'Days left':>10}")
    print(f"{'-' * 63}")
    for item in items:
        print(
            f"{item.sku:<30} {item.on_hand_qty:>10g} "
            f"{item.avg_units_per_day:>10.2f} {item.days_remaining:>10.1f}"
        )
    print()


def summary_command(args, config, pool) -> None:
    """Show turnover KPIs."""
    service = MetricsSummaryService(PostgresStore(pool), config.forecast.lookup_batch_size)
    summary = service.summarize(workspace_from(args, config), start=args.start, end=args.end)
    print_json(summary.model_dump(mode="json", by_alias=True))


def orders_command(args, config, pool) -> None:
    """List orders with GMV and units."""
    page = list_orders_with_metrics(
        PostgresStore(pool),
        workspace_from(args, config),
        start=args.start,
        end=args.end,
        limit=validate_limit(args.limit),
        offset=validate_offset(args.offset),
    )
    print_json(
        {
            "page": {"limit": page.limit, "offset": page.offset, "total": page.total},
            "items": [o.model_dump(mode="json", by_alias=True) for o in page.items],
        }
    )


def order_lines_command(args, config, pool) -> None:
    """List the lines of one order."""
    lines = order_line_details(PostgresStore(pool), args.order_id)
    print_json(
        {"orderId": args.order_id, "items": [line.model_dump(mode="json", by_alias=True) for line in lines]}
    )


COMMANDS = {
    "init-db": init_db_command,
    "imports": imports_command,
    "import-show": import_show_command,
    "import-errors": import_errors_command,
    "critical-stock": critical_stock_command,
    "summary": summary_command,
    "orders": orders_command,
    "order-lines": order_lines_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tover-admin",
        description="Admin CLI for tover",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    imports_parser = subparsers.add_parser("imports", help="List recent imports")
    imports_parser.add_argument("--workspace", help="Workspace ID (default: TOVER_WORKSPACE_ID)")
    imports_parser.add_argument("--limit", type=int, default=20, help="Page size (default: 20)")
    imports_parser.add_argument("--offset", type=int, default=0, help="Page offset (default: 0)")
    imports_parser.add_argument("--json", action="store_true", help="Print JSON")

    show_parser = subparsers.add_parser("import-show", help="Show one import")
    show_parser.add_argument("--import-id", required=True, help="Import ID")

    errors_parser = subparsers.add_parser("import-errors", help="List an import's row errors")
    errors_parser.add_argument("--import-id", required=True, help="Import ID")
    errors_parser.add_argument("--limit", type=int, default=50, help="Page size (default: 50)")
    errors_parser.add_argument("--offset", type=int, default=0, help="Page offset (default: 0)")
    errors_parser.add_argument("--json", action="store_true", help="Print JSON")

    stock_parser = subparsers.add_parser("critical-stock", help="Forecast SKUs about to run out")
    stock_parser.add_argument("--workspace", help="Workspace ID (default: TOVER_WORKSPACE_ID)")
    stock_parser.add_argument("--days", type=int, help="Horizon in days (default: from config)")
    stock_parser.add_argument("--lookback", type=int, help="Sales window in days (default: from config)")
    stock_parser.add_argument("--json", action="store_true", help="Print JSON")

    summary_parser = subparsers.add_parser("summary", help="Show turnover KPIs")
    summary_parser.add_argument("--workspace", help="Workspace ID (default: TOVER_WORKSPACE_ID)")
    summary_parser.add_argument("--from", dest="start", type=parse_timestamp, help="Window start (ISO 8601)")
    summary_parser.add_argument("--to", dest="end", type=parse_timestamp, help="Window end (ISO 8601)")

    orders_parser = subparsers.add_parser("orders", help="List orders with GMV and units")
    orders_parser.add_argument("--workspace", help="Workspace ID (default: TOVER_WORKSPACE_ID)")
    orders_parser.add_argument("--from", dest="start", type=parse_timestamp, help="Window start (ISO 8601)")
    orders_parser.add_argument("--to", dest="end", type=parse_timestamp, help="Window end (ISO 8601)")
    orders_parser.add_argument("--limit", type=int, default=50, help="Page size (default: 50)")
    orders_parser.add_argument("--offset", type=int, default=0, help="Page offset (default: 0)")

    lines_parser = subparsers.add_parser("order-lines", help="List the lines of an order")
    lines_parser.add_argument("--order-id", required=True, help="Order ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for admin CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = resolve_config(args)
    pool = open_pool(config)
    try:
        COMMANDS[args.command](args, config, pool)
    except (NotFoundError, ValidationError, ValueError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except PersistenceError as e:
        logger.error("Command failed", extra={"command": args.command, "kind": e.kind})
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    finally:
        pool.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
