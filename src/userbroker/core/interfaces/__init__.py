"""Core interfaces for the broker."""

from userbroker.core.interfaces.provisioner import (
    ProvisionerError,
    ResourceKind,
    ResourceProvisioner,
    ResourceRef,
    WorkloadAddress,
    WorkloadNotReadyError,
)

__all__ = [
    "ProvisionerError",
    "ResourceKind",
    "ResourceProvisioner",
    "ResourceRef",
    "WorkloadAddress",
    "WorkloadNotReadyError",
]
