"""Prometheus metrics definitions for the broker.

Two tiers:
- Lifecycle operations (create, get, remove, bind, unbind) as seen by callers
- Kubernetes API calls made while provisioning
"""

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Histogram Buckets
# =============================================================================
# Registry-only operations are fast; provisioning waits on the cluster API
_BUCKETS_OPERATION = (
    0.005, 0.01, 0.025, 0.05, 0.1,
    0.25, 0.5, 1, 2.5, 5,
    10, 30,
)

# =============================================================================
# Lifecycle Operation Metrics
# =============================================================================

BROKER_OPERATION_DURATION = Histogram(
    "userbroker_operation_duration_seconds",
    "Duration of instance lifecycle operations",
    ["operation"],  # create, get, remove, bind, unbind
    buckets=_BUCKETS_OPERATION,
)

BROKER_OPERATION_ERRORS = Counter(
    "userbroker_operation_errors_total",
    "Total lifecycle operation errors",
    ["operation", "error_code"],  # error_code: ErrorCode value or INTERNAL
)

BROKER_INSTANCES_TOTAL = Gauge(
    "userbroker_instances_total",
    "Number of registered service instances",
)

# =============================================================================
# Kubernetes API Metrics
# =============================================================================

BROKER_KUBE_DURATION = Histogram(
    "userbroker_kube_duration_seconds",
    "Duration of Kubernetes API calls",
    ["operation"],  # pod_create, pod_list, pod_delete, secret_create, secret_delete, version
    buckets=_BUCKETS_OPERATION,
)

BROKER_KUBE_ERRORS = Counter(
    "userbroker_kube_errors_total",
    "Total Kubernetes API call errors",
    ["operation", "error_type"],  # error_type: api_error, connection
)


def _init_metrics() -> None:
    """Initialize labeled metrics with zero values."""
    for op in ["create", "get", "remove", "bind", "unbind"]:
        BROKER_OPERATION_DURATION.labels(operation=op)

    for op in ["pod_create", "pod_list", "pod_delete", "secret_create", "secret_delete", "version"]:
        BROKER_KUBE_DURATION.labels(operation=op)
        BROKER_KUBE_ERRORS.labels(operation=op, error_type="api_error")
        BROKER_KUBE_ERRORS.labels(operation=op, error_type="connection")


_init_metrics()
