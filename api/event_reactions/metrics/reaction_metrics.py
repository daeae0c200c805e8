"""Prometheus metrics for reaction ingestion and the reaction store.

Provides observability into:
- Reactions stored, by sentiment
- Validation failures, by operation
- Store latency and failures, by operation
"""

import functools
import logging
import time
from typing import Callable

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# ============================================
# Ingestion metrics
# ============================================

reactions_submitted_total = Counter(
    "reactions_submitted_total",
    "Total reactions persisted, by derived sentiment",
    ["sentiment"],  # positive, negative, neutral
)

reaction_validation_failures_total = Counter(
    "reaction_validation_failures_total",
    "Requests rejected because required fields were missing or empty",
    ["operation"],  # submit, aggregates, list_user, list_event
)

# ============================================
# Store metrics
# ============================================

reaction_store_operation_seconds = Histogram(
    "reaction_store_operation_seconds",
    "Latency of reaction store operations",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
)

reaction_store_errors_total = Counter(
    "reaction_store_errors_total",
    "Total reaction store failures, by operation",
    ["operation"],
)


def instrument_store_operation(operation: str):
    """
    Decorator recording latency and failures of a synchronous store method.

    Args:
        operation: Label value (e.g., "append", "count_by_sentiment")

    Example:
        @instrument_store_operation("append")
        def append(self, record):
            ...
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            except Exception as e:
                reaction_store_errors_total.labels(operation=operation).inc()
                logger.debug(
                    f"Store operation '{operation}' failed with {type(e).__name__}"
                )
                raise
            finally:
                reaction_store_operation_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start_time
                )

        return wrapper

    return decorator
