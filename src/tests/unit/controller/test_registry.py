"""Unit tests for InstanceRegistry."""

import pytest

from userbroker.controller.registry import InstanceRegistry
from userbroker.core.errors import (
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    OperationInProgressError,
)
from userbroker.core.models import ServiceInstance, ServiceType


def _instance(instance_id: str = "svc-1") -> ServiceInstance:
    return ServiceInstance(
        id=instance_id,
        service_type=ServiceType.USER_PROVIDED,
        credential={"user": "admin"},
    )


class TestInstanceRegistry:
    """Tests for reservation, commit, hold and removal."""

    async def test_get_unknown_raises_not_found(self, registry: InstanceRegistry) -> None:
        with pytest.raises(InstanceNotFoundError):
            await registry.get("missing")

    async def test_reserved_id_is_invisible(self, registry: InstanceRegistry) -> None:
        """A reservation is not readable until committed."""
        await registry.reserve("svc-1")

        with pytest.raises(InstanceNotFoundError):
            await registry.get("svc-1")
        assert await registry.count() == 0

    async def test_reserve_rejects_reserved_and_committed(
        self, registry: InstanceRegistry
    ) -> None:
        await registry.reserve("svc-1")
        with pytest.raises(InstanceAlreadyExistsError):
            await registry.reserve("svc-1")

        await registry.commit(_instance("svc-1"))
        with pytest.raises(InstanceAlreadyExistsError):
            await registry.reserve("svc-1")

    async def test_release_frees_reservation(self, registry: InstanceRegistry) -> None:
        await registry.reserve("svc-1")
        await registry.release("svc-1")

        await registry.reserve("svc-1")

    async def test_get_returns_copy(self, registry: InstanceRegistry) -> None:
        """Mutating a returned instance does not touch the registry."""
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))

        copy = await registry.get("svc-1")
        copy.credential["user"] = "mallory"

        stored = await registry.get("svc-1")
        assert stored.credential == {"user": "admin"}

    async def test_hold_blocks_second_hold_and_bind_reads(
        self, registry: InstanceRegistry
    ) -> None:
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))

        await registry.hold("svc-1")

        with pytest.raises(OperationInProgressError):
            await registry.hold("svc-1")
        with pytest.raises(OperationInProgressError):
            await registry.get("svc-1", reject_in_flight=True)
        # Plain reads still see the fully built instance.
        assert (await registry.get("svc-1")).id == "svc-1"

    async def test_release_after_hold_keeps_instance(self, registry: InstanceRegistry) -> None:
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))
        await registry.hold("svc-1")

        await registry.release("svc-1")

        assert (await registry.get("svc-1", reject_in_flight=True)).id == "svc-1"

    async def test_remove_drops_instance(self, registry: InstanceRegistry) -> None:
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))
        await registry.hold("svc-1")

        await registry.remove("svc-1")

        with pytest.raises(InstanceNotFoundError):
            await registry.get("svc-1")
        await registry.reserve("svc-1")

    async def test_set_credential_overwrites(self, registry: InstanceRegistry) -> None:
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))

        snapshot = await registry.get("svc-1")

        await registry.set_credential(
            "svc-1", {"host": "10.0.0.1"}, generation=snapshot.generation
        )

        assert (await registry.get("svc-1")).credential == {"host": "10.0.0.1"}

    async def test_set_credential_on_removed_instance(self, registry: InstanceRegistry) -> None:
        with pytest.raises(InstanceNotFoundError):
            await registry.set_credential("gone", {"host": "10.0.0.1"}, generation=1)

    async def test_commit_assigns_new_generation(self, registry: InstanceRegistry) -> None:
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))
        first = await registry.get("svc-1")
        await registry.hold("svc-1")
        await registry.remove("svc-1")

        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))
        second = await registry.get("svc-1")

        assert second.generation != first.generation

    async def test_set_credential_on_recreated_instance(
        self, registry: InstanceRegistry
    ) -> None:
        """A credential built from an earlier instance is not stored on its successor."""
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))
        stale = await registry.get("svc-1")
        await registry.hold("svc-1")
        await registry.remove("svc-1")
        await registry.reserve("svc-1")
        await registry.commit(_instance("svc-1"))

        with pytest.raises(InstanceNotFoundError, match="replaced"):
            await registry.set_credential(
                "svc-1", {"host": "10.0.0.1"}, generation=stale.generation
            )

        assert (await registry.get("svc-1")).credential == {"user": "admin"}
