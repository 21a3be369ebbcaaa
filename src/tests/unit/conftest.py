"""Fixtures for broker unit tests."""

from unittest.mock import AsyncMock

import pytest

from userbroker.config import RuntimeConfig
from userbroker.controller import (
    InstanceLifecycleController,
    InstanceRegistry,
    default_strategies,
)
from userbroker.core.interfaces import (
    ResourceKind,
    ResourceProvisioner,
    ResourceRef,
    WorkloadAddress,
)


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """Runtime config with defaults."""
    return RuntimeConfig()


@pytest.fixture
def mock_provisioner() -> AsyncMock:
    """Mock ResourceProvisioner whose calls all succeed."""

    async def create_secret(instance_id, location, template, data):
        return ResourceRef(
            kind=ResourceKind.SECRET,
            name=template.secret_name(instance_id),
            namespace=location,
        )

    async def create_workload(instance_id, location, template):
        return ResourceRef(
            kind=ResourceKind.POD,
            name=template.pod_name(instance_id),
            namespace=location,
        )

    provisioner = AsyncMock(spec=ResourceProvisioner)
    provisioner.create_secret = AsyncMock(side_effect=create_secret)
    provisioner.create_workload = AsyncMock(side_effect=create_workload)
    provisioner.delete_resource = AsyncMock()
    provisioner.delete_instance_resources = AsyncMock()
    provisioner.get_workload_address = AsyncMock(
        return_value=WorkloadAddress(host="10.0.0.5", port=27017)
    )
    provisioner.server_version = AsyncMock(return_value="v1.29.2")
    return provisioner


@pytest.fixture
def registry() -> InstanceRegistry:
    return InstanceRegistry()


@pytest.fixture
def controller(
    mock_provisioner: AsyncMock,
    runtime_config: RuntimeConfig,
    registry: InstanceRegistry,
) -> InstanceLifecycleController:
    """Controller wired to the mock provisioner."""
    return InstanceLifecycleController(
        provisioner=mock_provisioner,
        strategies=default_strategies(mock_provisioner, runtime_config),
        registry=registry,
    )
