"""Prometheus metrics for the broker."""

from userbroker.metrics.collector import (
    BROKER_INSTANCES_TOTAL,
    BROKER_KUBE_DURATION,
    BROKER_KUBE_ERRORS,
    BROKER_OPERATION_DURATION,
    BROKER_OPERATION_ERRORS,
)

__all__ = [
    "BROKER_INSTANCES_TOTAL",
    "BROKER_KUBE_DURATION",
    "BROKER_KUBE_ERRORS",
    "BROKER_OPERATION_DURATION",
    "BROKER_OPERATION_ERRORS",
]
