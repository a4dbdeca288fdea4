"""Prometheus metrics for pool operations."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

POOL_HANDLES = Gauge(
    "milvus_pool_handles",
    "Number of handles currently registered in a pool",
    labelnames=("pool",),
)

POOL_OPERATIONS = Counter(
    "milvus_pool_operations_total",
    "Pool operations executed, by outcome",
    labelnames=("pool", "operation", "outcome"),
)

POOL_FACTORY_LATENCY = Histogram(
    "milvus_pool_factory_duration_seconds",
    "Time spent inside the handle factory",
    labelnames=("pool",),
)


def record_operation(pool: str, operation: str, outcome: str) -> None:
    POOL_OPERATIONS.labels(pool=pool, operation=operation, outcome=outcome).inc()


def record_factory_latency(pool: str, duration_seconds: float) -> None:
    POOL_FACTORY_LATENCY.labels(pool=pool).observe(max(duration_seconds, 0.0))


def record_pool_size(pool: str, size: int) -> None:
    POOL_HANDLES.labels(pool=pool).set(float(size))


__all__ = [
    "POOL_FACTORY_LATENCY",
    "POOL_HANDLES",
    "POOL_OPERATIONS",
    "record_factory_latency",
    "record_operation",
    "record_pool_size",
]
