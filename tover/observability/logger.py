"""
Logging setup for tover.

Everything under the "tover" logger namespace goes to a single stderr
handler on the package root logger. The default output is one JSON object
per line (python-json-logger); LOG_FORMAT=text gives plain lines for local
runs. Fields passed through ``extra=`` become top-level JSON keys.
"""
import logging
import os
import sys
import time
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "tover"

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with a UTC ISO-8601 timestamp, upper-case level and logger name."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        # fields named in the format string arrive as None
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            )
        log_record["level"] = str(log_record.get("level") or record.levelname).upper()
        log_record["logger"] = record.name
        if record.levelno >= logging.ERROR:
            log_record.setdefault("location", f"{record.module}:{record.funcName}:{record.lineno}")


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    # getLevelName returns "Level X" for unknown names
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_formatter(format_type: str | None) -> logging.Formatter:
    kind = (format_type or os.getenv("LOG_FORMAT") or "json").lower()
    if kind == "text":
        return logging.Formatter(TEXT_FORMAT)
    return CustomJsonFormatter(JSON_FORMAT)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Give a logger exactly one stderr handler.

    Args:
        name: Logger name
        level: Level name; LOG_LEVEL, then INFO, when omitted
        format_type: "json" or "text"; LOG_FORMAT, then "json", when omitted

    Returns:
        The configured logger (propagation off)
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # stdout is reserved for CLI results
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter(format_type))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_logging(level: str | None = None, format_type: str | None = None) -> logging.Logger:
    """Reconfigure the package root logger; the CLIs call this once config is loaded."""
    return setup_logger(DEFAULT_LOGGER_NAME, level=level, format_type=format_type)


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Logger for a module, usually ``get_logger(__name__)``.

    Names inside the tover namespace get no handler of their own and
    propagate to the package root, which is set up from the environment
    the first time any logger is requested. Other names get their own
    handler.
    """
    if not logging.getLogger(DEFAULT_LOGGER_NAME).handlers:
        setup_logger(DEFAULT_LOGGER_NAME)

    logger = logging.getLogger(name)
    in_package = name == DEFAULT_LOGGER_NAME or name.startswith(DEFAULT_LOGGER_NAME + ".")
    if in_package or logger.handlers:
        return logger
    return setup_logger(name)


class log_operation:
    """
    Log the start and end of a unit of work with its duration.

    Fields given up front appear on both lines; fields added with ``add()``
    inside the block appear on the closing line only. Exceptions are logged
    with their traceback and re-raised.

        with log_operation("Processing import", logger=logger, import_id=id) as op:
            outcome = run()
            op.add(import_status=outcome.status.value)
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.fields = fields
        self.result_fields: dict = {}
        self.start_time: float | None = None
        self.duration: float | None = None

    def add(self, **fields) -> None:
        self.result_fields.update(fields)

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(
            f"Starting: {self.operation_name}",
            extra={"operation": self.operation_name, **self.fields},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        extra = {
            "operation": self.operation_name,
            "duration_seconds": round(self.duration, 3),
            **self.fields,
            **self.result_fields,
        }

        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**extra, "status": "success"})
        else:
            extra.update(status="error", error_type=exc_type.__name__, error_message=str(exc_val))
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra=extra,
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False
