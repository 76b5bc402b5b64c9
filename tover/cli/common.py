"""
Argument and setup helpers shared by the CLIs.
"""

import argparse
import json
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from tover.config import ToverConfig, load_config
from tover.observability.logger import configure_logging
from tover.utils.validation import ValidationError, validate_workspace_id
from tover.warehouse.connection import DatabaseConnectionPool


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add --config, database and logging options (defaults come from config)."""
    parser.add_argument(
        "--config",
        help="Path to YAML config file (optional)"
    )
    parser.add_argument("--db-host", help="Database host (default: from config)")
    parser.add_argument("--db-port", type=int, help="Database port (default: from config)")
    parser.add_argument("--db-name", help="Database name (default: from config)")
    parser.add_argument("--db-user", help="Database user (default: from config)")
    parser.add_argument("--db-password", help="Database password (default: DB_PASSWORD)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from config)"
    )


def resolve_config(args: argparse.Namespace) -> ToverConfig:
    """Load config and apply command-line overrides, then set up logging."""
    config = load_config(args.config)

    overrides = {
        "host": args.db_host,
        "port": args.db_port,
        "name": args.db_name,
        "user": args.db_user,
        "password": args.db_password,
    }
    database = config.database.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    config = config.model_copy(update={"database": database})

    configure_logging(level=args.log_level or config.logging.level, format_type=config.logging.format)
    return config


def open_pool(config: ToverConfig) -> DatabaseConnectionPool:
    pool = DatabaseConnectionPool.from_config(config.database)
    pool.open()
    return pool


def workspace_from(args: argparse.Namespace, config: ToverConfig) -> str:
    """--workspace, falling back to TOVER_WORKSPACE_ID."""
    workspace_id = getattr(args, "workspace", None) or config.workspace_id
    if not workspace_id:
        raise SystemExit("error: --workspace is required (or set TOVER_WORKSPACE_ID)")
    try:
        return validate_workspace_id(workspace_id, "--workspace")
    except ValidationError as e:
        raise SystemExit(f"error: {e}") from e


def parse_timestamp(value: str) -> datetime:
    """argparse type for --from/--to; naive values are read as UTC."""
    try:
        parsed = date_parser.isoparse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid timestamp: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))
