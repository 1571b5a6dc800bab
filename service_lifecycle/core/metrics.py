"""
service_lifecycle/core/metrics.py
Central Prometheus metrics registry for the service lifecycle.
"""

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, Histogram, generate_latest
)

# Global registry instance
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================
# Metric definitions
# =============================
TRANSITIONS = Counter(
    "service_lifecycle_transitions_total",
    "Number of lifecycle state transitions",
    ["from_status", "to_status"],
    registry=REGISTRY,
)

STATUS = Gauge(
    "service_lifecycle_status",
    "1 for the current lifecycle status, 0 for every other status",
    ["status"],
    registry=REGISTRY,
)

UPTIME = Gauge(
    "service_lifecycle_uptime_seconds",
    "Seconds since the service last reached RUNNING (0 when not running)",
    registry=REGISTRY,
)

COLLABORATOR_CALL_LATENCY = Histogram(
    "service_lifecycle_collaborator_call_seconds",
    "Duration of connect/close/bind calls made during transitions",
    ["target", "operation"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30),
    registry=REGISTRY,
)


# =============================
# Helper functions
# =============================
def record_transition(from_status: str, to_status: str, all_statuses) -> None:
    """Count a transition and flip the one-hot status gauge."""
    TRANSITIONS.labels(from_status=from_status, to_status=to_status).inc()
    for status in all_statuses:
        STATUS.labels(status=status).set(1 if status == to_status else 0)


def observe_call(target: str, operation: str, seconds: float) -> None:
    COLLABORATOR_CALL_LATENCY.labels(target=target, operation=operation).observe(seconds)


def render_prometheus_metrics(uptime_seconds: float = 0.0) -> bytes:
    """Refresh the uptime gauge and return the Prometheus text exposition."""
    UPTIME.set(uptime_seconds)
    return generate_latest(REGISTRY)
