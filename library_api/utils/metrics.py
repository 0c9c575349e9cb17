"""
Prometheus metrics for the response cache and HTTP surface.

Metrics are created through the _get_or_create_* helpers so that module
reloads (uvicorn --reload, repeated imports in tests) do not raise duplicate
registration errors.
"""

from prometheus_client import REGISTRY, Counter, Gauge


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Counter instance.
    """
    try:
        return Counter(name, doc, labels or [])
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """
    Get existing gauge or create new one.

    Args:
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Gauge instance.
    """
    try:
        return Gauge(name, doc, labels or [])
    except ValueError:
        return REGISTRY._names_to_collectors[name]


# Response cache metrics
cache_hits_total = _get_or_create_counter(
    "response_cache_hits_total",
    "Total response cache hits",
    ["backend"],
)

cache_misses_total = _get_or_create_counter(
    "response_cache_misses_total",
    "Total response cache misses",
    ["backend"],
)

cache_populations_total = _get_or_create_counter(
    "response_cache_populations_total",
    "Total populate callbacks executed on cache miss",
    ["backend", "status"],  # status: stored, discarded, error
)

cache_single_flight_waits_total = _get_or_create_counter(
    "response_cache_single_flight_waits_total",
    "Total requests that awaited an in-flight population",
    ["backend"],
)

cache_invalidated_entries_total = _get_or_create_counter(
    "response_cache_invalidated_entries_total",
    "Total cache entries removed by tag invalidation",
    ["backend", "tag"],
)

memory_cache_size = _get_or_create_gauge(
    "response_cache_memory_entries",
    "Current number of entries held by the in-memory cache backend",
)

memory_cache_evictions_total = _get_or_create_counter(
    "response_cache_memory_evictions_total",
    "Total LRU evictions from the in-memory cache backend",
)

# Authorization metrics
permission_denied_total = _get_or_create_counter(
    "permission_denied_total",
    "Total requests rejected by the role gate",
    ["method", "endpoint"],
)

__all__ = [
    "cache_hits_total",
    "cache_misses_total",
    "cache_populations_total",
    "cache_single_flight_waits_total",
    "cache_invalidated_entries_total",
    "memory_cache_size",
    "memory_cache_evictions_total",
    "permission_denied_total",
]
