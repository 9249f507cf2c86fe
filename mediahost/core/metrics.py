"""
Prometheus Metrics for Observability

Tracks media host calls, operation latency and record updates.
A host application can expose get_metrics() on its /metrics endpoint.
"""

import time
from contextlib import contextmanager

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY
)

# =============================================================================
# Metrics Definitions
# =============================================================================

media_host_calls_total = Counter(
    "media_host_calls_total",
    "Total number of media host API calls",
    labelnames=["operation", "status", "http_status"]
)

media_operation_latency_seconds = Histogram(
    "media_operation_latency_seconds",
    "Time spent in each media operation",
    labelnames=["operation", "status"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

record_updates_total = Counter(
    "record_updates_total",
    "Total number of record URL updates",
    labelnames=["record_type", "status"]
)

app_info = Info(
    "mediahost_app",
    "Library information"
)


# =============================================================================
# Helper Functions
# =============================================================================

def set_app_info(version: str, environment: str):
    """Set library info metric."""
    app_info.info({
        "version": version,
        "environment": environment
    })


@contextmanager
def track_operation_latency(operation: str):
    """
    Context manager to track operation latency.

    Usage:
        with track_operation_latency("upload"):
            # do work
    """
    start = time.time()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.time() - start
        media_operation_latency_seconds.labels(operation=operation, status=status).observe(duration)


def record_media_host_call(operation: str, status: str, http_status: int = 200):
    """Record a media host API call."""
    media_host_calls_total.labels(
        operation=operation,
        status=status,
        http_status=str(http_status)
    ).inc()


def record_record_update(record_type: str, status: str):
    """Record the outcome of a record URL update."""
    record_updates_total.labels(record_type=record_type, status=status).inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
