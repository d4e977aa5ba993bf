"""
Prometheus metrics for monitoring and observability.

Provides counters and histograms for tracking:
- Conversion requests and their latency
- Generated tables and collections
- Stored conversion files
"""

import asyncio
import time
from typing import Callable
from functools import wraps
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)

# Create a global registry
REGISTRY = CollectorRegistry()

# ========== Counters ==========

# Conversions
conversions_total = Counter(
    "conversions_total",
    "Total number of JSON conversions",
    ["target", "status"],  # sql/nosql/both/analyze, success/failure
    registry=REGISTRY,
)

# Generated relational tables
tables_generated_total = Counter(
    "tables_generated_total",
    "Total number of relational tables generated",
    registry=REGISTRY,
)

# Generated document collections
collections_generated_total = Counter(
    "collections_generated_total",
    "Total number of document collections generated",
    registry=REGISTRY,
)

# Stored files
files_stored_total = Counter(
    "files_stored_total",
    "Total number of files written to the file store",
    ["category"],
    registry=REGISTRY,
)

# ========== Histograms ==========

# Conversion duration
conversion_duration_seconds = Histogram(
    "conversion_duration_seconds",
    "Time to convert a JSON value",
    ["target"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
    registry=REGISTRY,
)


# ========== Metric Decorators ==========

def track_conversion_time(target: str):
    """
    Decorator to track conversion latency and outcome.

    Args:
        target: Conversion target label (sql/nosql/both/analyze)
    """
    def decorator(func: Callable):
        def _record(start_time: float, status: str) -> None:
            conversion_duration_seconds.labels(
                target=target).observe(time.time() - start_time)
            conversions_total.labels(target=target, status=status).inc()

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                return await func(*args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                _record(start_time, status)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                return func(*args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                _record(start_time, status)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus format.

    Returns:
        Metrics as bytes
    """
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get content type for metrics response."""
    return CONTENT_TYPE_LATEST
