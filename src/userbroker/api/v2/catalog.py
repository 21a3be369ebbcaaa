"""Catalog API endpoint."""

from fastapi import APIRouter, Depends

from userbroker.api.dependencies import get_controller
from userbroker.controller import Catalog, InstanceLifecycleController

router = APIRouter(tags=["catalog"])


@router.get("/catalog", response_model=Catalog)
async def get_catalog(
    controller: InstanceLifecycleController = Depends(get_controller),
) -> Catalog:
    """List offered services and plans."""
    return controller.catalog()
