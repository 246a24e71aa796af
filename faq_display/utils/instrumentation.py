"""
FAQ processor instrumentation for Prometheus monitoring.

This module provides metrics and a decorator for the FAQ processing pipeline:
- Invocation counting
- Stage-level latency measurement (page tree, fetch, relations, grouping)
- Error categorization by stage and type
"""

import functools
import logging
import time
from typing import Callable

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# FAQ Processor Metrics
# =============================================================================

FAQ_PROCESSOR_RUNS = Counter(
    "faq_processor_runs_total",
    "Total number of FAQ processor invocations",
)

FAQ_PROCESSOR_LATENCY = Histogram(
    "faq_processor_stage_latency_seconds",
    "Latency of FAQ processor stages",
    ["stage_name"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

FAQ_PROCESSOR_ERRORS = Counter(
    "faq_processor_errors_total",
    "Total FAQ processor errors by stage and type",
    ["stage_name", "error_type"],
)


def instrument_stage(stage_name: str):
    """
    Decorator to instrument FAQ processor stages with metrics.

    Tracks:
    - Latency of the stage
    - Errors by type (the exception is re-raised)

    Args:
        stage_name: Name of the stage (e.g., "page_tree", "relations")

    Example:
        @instrument_stage("relations")
        def resolve_relations(self, ...):
            ...
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                error_type = type(e).__name__
                FAQ_PROCESSOR_ERRORS.labels(
                    stage_name=stage_name, error_type=error_type
                ).inc()
                logger.error(f"Stage '{stage_name}' failed with {error_type}: {str(e)}")
                raise

            latency = time.perf_counter() - start_time
            FAQ_PROCESSOR_LATENCY.labels(stage_name=stage_name).observe(latency)
            logger.debug(f"Stage '{stage_name}' completed in {latency:.3f}s")
            return result

        return wrapper

    return decorator
