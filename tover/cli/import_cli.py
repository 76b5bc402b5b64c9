"""
Command-line interface for CSV imports.

Usage:
    tover-import --workspace <workspace_id> --type orders_csv --input <file_path> [options]
"""

import argparse
import sys
from pathlib import Path

from tover.batch import ImportPipeline, dry_run
from tover.core.errors import CSVParseError, PersistenceError, UnknownImportTypeError
from tover.core.models import ImportKind, ImportStatus
from tover.observability.logger import get_logger
from tover.warehouse.postgres_store import PostgresStore

from .common import add_common_arguments, open_pool, print_json, resolve_config, workspace_from

logger = get_logger(__name__)


def import_command(args) -> int:
    """
    Execute one import.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code (0 completed, 1 failed)
    """
    config = resolve_config(args)

    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error("Input file not found", extra={"path": args.input})
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1
    content = input_path.read_bytes()

    if args.dry_run:
        try:
            report = dry_run(content, args.type)
        except (CSVParseError, UnknownImportTypeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print_json(report.to_dict(max_errors=args.max_errors))
        return 1 if report.header_error else 0

    workspace_id = workspace_from(args, config)
    pool = open_pool(config)
    try:
        pipeline = ImportPipeline.from_config(PostgresStore(pool), config.imports)
        outcome = pipeline.run(workspace_id, content, args.type, file_name=input_path.name)
    except (CSVParseError, UnknownImportTypeError, PersistenceError) as e:
        logger.error("Import failed", extra={"error_type": type(e).__name__})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        pool.close()

    print_json(outcome.to_dict())
    return 0 if outcome.status is ImportStatus.COMPLETED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tover-import",
        description="Import a marketplace CSV file into a workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import orders
  tover-import --workspace shop-1 --type orders_csv --input data/orders.csv

  # Validate only, nothing is written
  tover-import --type order_lines_csv --input data/lines.csv --dry-run
        """
    )
    parser.add_argument(
        "--workspace",
        help="Workspace ID (default: TOVER_WORKSPACE_ID)"
    )
    parser.add_argument(
        "--type",
        required=True,
        choices=ImportKind.values(),
        help="Import type"
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to input CSV file"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and validate without writing to database"
    )
    parser.add_argument(
        "--max-errors",
        type=int,
        default=20,
        help="Row errors to show in dry-run output (default: 20)"
    )
    add_common_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    return import_command(args)


if __name__ == "__main__":
    sys.exit(main())
