"""Service binding API endpoints."""

from fastapi import APIRouter, Depends, Response

from userbroker.api.dependencies import get_controller
from userbroker.controller import InstanceLifecycleController
from userbroker.core.schemas import BindingRequest, CreateServiceBindingResponse

router = APIRouter(
    prefix="/service_instances/{instance_id}/service_bindings",
    tags=["bindings"],
)


@router.put("/{binding_id}", status_code=201, response_model=CreateServiceBindingResponse)
async def bind(
    instance_id: str,
    binding_id: str,
    request: BindingRequest,
    controller: InstanceLifecycleController = Depends(get_controller),
) -> CreateServiceBindingResponse:
    """Bind an instance and return its credentials."""
    return await controller.bind(instance_id, binding_id, request)


@router.delete("/{binding_id}")
async def unbind(
    instance_id: str,
    binding_id: str,
    controller: InstanceLifecycleController = Depends(get_controller),
) -> Response:
    """Release a binding."""
    await controller.unbind(instance_id, binding_id)
    return Response(content="{}", media_type="application/json")
