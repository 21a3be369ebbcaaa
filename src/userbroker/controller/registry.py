"""In-memory instance registry.

The registry is the only owner of instance state. Every method runs
under the registry's ReadWriteLock and hands out deep copies, so a
caller can never observe (or cause) a half-updated instance.

Ids move through two sets:
- in-flight: reserved by a create, or held by a remove, while the
  provisioner is called outside the lock
- committed: visible to get/bind/remove
A create's reservation is in-flight but not committed, so readers see
either nothing or the fully populated instance.
"""

from userbroker.controller.lock import ReadWriteLock
from userbroker.core.errors import (
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    OperationInProgressError,
)
from userbroker.core.models import Credential, ServiceInstance


class InstanceRegistry:
    """Volatile map from instance id to ServiceInstance."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._instances: dict[str, ServiceInstance] = {}
        self._in_flight: set[str] = set()
        self._generation = 0

    async def get(self, instance_id: str, *, reject_in_flight: bool = False) -> ServiceInstance:
        """Return a copy of a committed instance.

        Raises:
            InstanceNotFoundError: Id not committed
            OperationInProgressError: reject_in_flight and the id is held
        """
        async with self._lock.read():
            instance = self._instances.get(instance_id)
            if instance is None:
                raise InstanceNotFoundError(f"no such instance with ID {instance_id}")
            if reject_in_flight and instance_id in self._in_flight:
                raise OperationInProgressError(
                    f"instance {instance_id} is being deprovisioned"
                )
            return instance.model_copy(deep=True)

    async def count(self) -> int:
        async with self._lock.read():
            return len(self._instances)

    async def reserve(self, instance_id: str) -> None:
        """Claim an unused id for a create in progress.

        Raises:
            InstanceAlreadyExistsError: Id committed or already reserved
        """
        async with self._lock.write():
            if instance_id in self._instances or instance_id in self._in_flight:
                raise InstanceAlreadyExistsError(
                    f"instance with ID {instance_id} already exists"
                )
            self._in_flight.add(instance_id)

    async def commit(self, instance: ServiceInstance) -> None:
        """Publish a fully provisioned instance and drop its reservation.

        The stored copy gets a fresh generation, so writers holding a
        snapshot of an earlier instance with the same id can tell it apart.
        """
        async with self._lock.write():
            self._generation += 1
            self._instances[instance.id] = instance.model_copy(
                update={"generation": self._generation}, deep=True
            )
            self._in_flight.discard(instance.id)

    async def release(self, instance_id: str) -> None:
        """Drop a reservation or hold without touching committed state."""
        async with self._lock.write():
            self._in_flight.discard(instance_id)

    async def hold(self, instance_id: str) -> ServiceInstance:
        """Mark a committed instance in-flight and return a copy of it.

        Raises:
            InstanceNotFoundError: Id not committed
            OperationInProgressError: Id already held
        """
        async with self._lock.write():
            instance = self._instances.get(instance_id)
            if instance is None:
                raise InstanceNotFoundError(f"no such instance with ID {instance_id}")
            if instance_id in self._in_flight:
                raise OperationInProgressError(
                    f"instance {instance_id} is being deprovisioned"
                )
            self._in_flight.add(instance_id)
            return instance.model_copy(deep=True)

    async def remove(self, instance_id: str) -> None:
        """Delete a committed instance and drop its hold."""
        async with self._lock.write():
            self._instances.pop(instance_id, None)
            self._in_flight.discard(instance_id)

    async def set_credential(
        self, instance_id: str, credential: Credential, *, generation: int
    ) -> ServiceInstance:
        """Replace an instance's stored credential.

        `generation` is the one read with the snapshot the credential was
        built from.

        Raises:
            InstanceNotFoundError: Instance removed or re-created meanwhile
            OperationInProgressError: Instance is being deprovisioned
        """
        async with self._lock.write():
            instance = self._instances.get(instance_id)
            if instance is None:
                raise InstanceNotFoundError(f"no such instance with ID {instance_id}")
            if instance.generation != generation:
                raise InstanceNotFoundError(
                    f"instance {instance_id} was replaced while binding"
                )
            if instance_id in self._in_flight:
                raise OperationInProgressError(
                    f"instance {instance_id} is being deprovisioned"
                )
            updated = instance.model_copy(update={"credential": dict(credential)}, deep=True)
            self._instances[instance_id] = updated
            return updated.model_copy(deep=True)
