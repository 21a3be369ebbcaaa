"""Resource provisioner interface for backing workloads."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

from userbroker.core.models import WorkloadTemplate


class ResourceKind(StrEnum):
    """Kinds of cluster resources created for an instance."""

    POD = "pod"
    SECRET = "secret"


@dataclass(frozen=True)
class ResourceRef:
    """Reference to one created cluster resource."""

    kind: ResourceKind
    name: str
    namespace: str


@dataclass(frozen=True)
class WorkloadAddress:
    """Network address of a running workload."""

    host: str
    port: int


class ProvisionerError(Exception):
    """Raised when the orchestration platform rejects or fails a call."""


class WorkloadNotReadyError(ProvisionerError):
    """Raised when an instance's workload has no reachable address yet."""

    def __init__(self, instance_id: str, reason: str) -> None:
        self.instance_id = instance_id
        self.reason = reason
        super().__init__(f"Workload for instance {instance_id} not ready: {reason}")


class ResourceProvisioner(ABC):
    """Interface for creating and destroying backing workloads.

    Implementations: KubernetesProvisioner

    Every failure is raised as ProvisionerError (or a subclass), so
    callers never depend on the platform client's exception types.
    """

    @abstractmethod
    async def create_secret(
        self,
        instance_id: str,
        location: str,
        template: WorkloadTemplate,
        data: dict[str, str],
    ) -> ResourceRef:
        """Create the credential secret for an instance.

        Args:
            instance_id: Instance ID (used for naming and labelling)
            location: Target namespace
            template: Service workload template
            data: Secret string data

        Returns:
            Reference to the created secret
        """
        ...

    @abstractmethod
    async def create_workload(
        self,
        instance_id: str,
        location: str,
        template: WorkloadTemplate,
    ) -> ResourceRef:
        """Create the workload pod for an instance.

        Args:
            instance_id: Instance ID (used for naming and labelling)
            location: Target namespace
            template: Service workload template

        Returns:
            Reference to the created pod
        """
        ...

    @abstractmethod
    async def delete_resource(self, ref: ResourceRef) -> None:
        """Delete a single resource. Already absent counts as deleted."""
        ...

    @abstractmethod
    async def delete_instance_resources(self, instance_id: str, location: str) -> None:
        """Delete every pod and secret labelled with the instance ID.

        Already absent counts as deleted. Both deletions are attempted
        before any failure is raised.
        """
        ...

    @abstractmethod
    async def get_workload_address(self, instance_id: str, location: str) -> WorkloadAddress:
        """Look up the address of the instance's running workload.

        Raises:
            WorkloadNotReadyError: No running pod with an address yet
        """
        ...

    @abstractmethod
    async def server_version(self) -> str:
        """Return the orchestration platform's version string."""
        ...
