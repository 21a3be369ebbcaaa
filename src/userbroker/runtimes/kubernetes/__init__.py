"""Kubernetes runtime for the broker."""

from userbroker.runtimes.kubernetes.naming import ResourceNaming
from userbroker.runtimes.kubernetes.provisioner import KubernetesProvisioner

__all__ = [
    "KubernetesProvisioner",
    "ResourceNaming",
]
