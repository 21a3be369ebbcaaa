"""Health and debug endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from userbroker import __version__
from userbroker.api.dependencies import get_controller
from userbroker.controller import InstanceLifecycleController

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class DebugResponse(BaseModel):
    """Platform version reported by the provisioner."""

    server_version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/debug", response_model=DebugResponse)
async def debug(
    controller: InstanceLifecycleController = Depends(get_controller),
) -> DebugResponse:
    """Report the orchestration platform version."""
    return DebugResponse(server_version=await controller.debug())
