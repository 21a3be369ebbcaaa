"""API v2 module (Open Service Broker routes)."""

from userbroker.api.v2.bindings import router as bindings_router
from userbroker.api.v2.catalog import router as catalog_router
from userbroker.api.v2.health import router as health_router
from userbroker.api.v2.instances import router as instances_router

__all__ = [
    "bindings_router",
    "catalog_router",
    "health_router",
    "instances_router",
]
