"""Service instance API endpoints."""

from fastapi import APIRouter, Depends

from userbroker.api.dependencies import get_controller
from userbroker.controller import InstanceLifecycleController
from userbroker.core.schemas import (
    CreateServiceInstanceRequest,
    CreateServiceInstanceResponse,
    DeleteServiceInstanceResponse,
    ServiceInstanceView,
)

router = APIRouter(prefix="/service_instances", tags=["instances"])


@router.put(
    "/{instance_id}",
    status_code=201,
    response_model=CreateServiceInstanceResponse,
    response_model_exclude_none=True,
)
async def create_instance(
    instance_id: str,
    request: CreateServiceInstanceRequest,
    controller: InstanceLifecycleController = Depends(get_controller),
) -> CreateServiceInstanceResponse:
    """Provision a service instance."""
    return await controller.create_service_instance(instance_id, request)


@router.get("/{instance_id}", response_model=ServiceInstanceView)
async def get_instance(
    instance_id: str,
    controller: InstanceLifecycleController = Depends(get_controller),
) -> ServiceInstanceView:
    """Fetch a service instance."""
    return await controller.get_service_instance(instance_id)


@router.delete("/{instance_id}", response_model=DeleteServiceInstanceResponse)
async def delete_instance(
    instance_id: str,
    controller: InstanceLifecycleController = Depends(get_controller),
) -> DeleteServiceInstanceResponse:
    """Deprovision a service instance."""
    return await controller.remove_service_instance(instance_id)
