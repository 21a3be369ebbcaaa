"""Provisioner runtimes."""

from userbroker.runtimes.kubernetes import KubernetesProvisioner

__all__ = ["KubernetesProvisioner"]
