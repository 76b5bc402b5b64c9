"""
Prometheus metrics collection for tover

This module provides metrics instrumentation for monitoring
CSV imports, data quality, and forecasting.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# IMPORT METRICS
# =======================

imports_total = Counter(
    name="tover_imports_total",
    documentation="Total number of imports by final status",
    labelnames=["import_type", "status"],  # status: completed, failed
    registry=REGISTRY,
)

import_rows_total = Counter(
    name="tover_import_rows_total",
    documentation="Rows seen by the import pipeline",
    labelnames=["import_type", "outcome"],  # outcome: inserted, rejected
    registry=REGISTRY,
)

import_duration_seconds = Histogram(
    name="tover_import_duration_seconds",
    documentation="Time spent processing one import",
    labelnames=["import_type"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

row_errors_total = Counter(
    name="tover_row_errors_total",
    documentation="Row errors written to import error logs",
    labelnames=["import_type", "error_code"],
    registry=REGISTRY,
)

persistence_errors_total = Counter(
    name="tover_persistence_errors_total",
    documentation="Batch-level persistence failures",
    labelnames=["operation", "kind"],  # kind: constraint_violation, unavailable, timeout, unknown
    registry=REGISTRY,
)

# =======================
# FORECAST METRICS
# =======================

forecast_duration_seconds = Histogram(
    name="tover_forecast_duration_seconds",
    documentation="Time spent computing a critical-stock forecast",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
    registry=REGISTRY,
)

critical_stock_items = Gauge(
    name="tover_critical_stock_items",
    documentation="Number of SKUs in the most recent critical-stock result",
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def record_import(import_type: str, status: str, inserted: int, rejected: int, duration: float | None = None) -> None:
    """
    Record the outcome of one import.

    Args:
        import_type: Import kind tag
        status: Final import status
        inserted: Rows persisted
        rejected: Row errors recorded (including batch-level entries)
        duration: Processing time in seconds
    """
    imports_total.labels(import_type=import_type, status=status).inc()
    if inserted:
        import_rows_total.labels(import_type=import_type, outcome="inserted").inc(inserted)
    if rejected:
        import_rows_total.labels(import_type=import_type, outcome="rejected").inc(rejected)
    if duration is not None:
        import_duration_seconds.labels(import_type=import_type).observe(duration)


def record_row_error(import_type: str, error_code: str, count: int = 1) -> None:
    """Count row errors by code."""
    row_errors_total.labels(import_type=import_type, error_code=error_code).inc(count)


def record_persistence_error(operation: str, kind: str) -> None:
    """Count a batch-level persistence failure."""
    persistence_errors_total.labels(operation=operation, kind=kind).inc()


def record_forecast(duration: float, item_count: int) -> None:
    """Record forecast latency and result size."""
    forecast_duration_seconds.observe(duration)
    critical_stock_items.set(item_count)


def get_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus exposition format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """
    Get the content type for Prometheus metrics

    Returns:
        Content type string
    """
    return CONTENT_TYPE_LATEST
