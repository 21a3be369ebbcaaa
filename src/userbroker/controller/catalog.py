"""Static service catalog."""

from pydantic import BaseModel, Field

from userbroker.core.errors import InvalidRequestError
from userbroker.core.models import ServiceType


class ServicePlan(BaseModel):
    """One plan of a catalog service."""

    id: str
    name: str
    description: str
    free: bool = True


class Service(BaseModel):
    """One offered service."""

    id: str
    name: str
    description: str
    bindable: bool = True
    plans: list[ServicePlan] = Field(default_factory=list)


class Catalog(BaseModel):
    """Catalog response body."""

    services: list[Service]


def _default_plan(plan_id: str) -> list[ServicePlan]:
    return [ServicePlan(id=plan_id, name="default", description="Sample plan description")]


# Service id -> (catalog entry, service type)
_SERVICES: dict[str, tuple[Service, ServiceType]] = {
    "4f6e6cf6-ffdd-425f-a2c7-3c9258ad2468": (
        Service(
            id="4f6e6cf6-ffdd-425f-a2c7-3c9258ad2468",
            name="user-provided-service",
            description="A user provided service",
            plans=_default_plan("86064792-7ea2-467b-af93-ac9694d96d52"),
        ),
        ServiceType.USER_PROVIDED,
    ),
    "a2f1b1c4-5e3c-4b1e-9d7e-0f6a3c2d8e11": (
        Service(
            id="a2f1b1c4-5e3c-4b1e-9d7e-0f6a3c2d8e11",
            name="database-pod-service",
            description="A database running in a pod in the requesting namespace",
            plans=_default_plan("c7d4e2a9-1b6f-4f0a-8e3d-5a9b7c1e2f40"),
        ),
        ServiceType.DATABASE_POD,
    ),
    "5b9e8d27-3f41-4c6a-a1d2-7e0c9b4f6a53": (
        Service(
            id="5b9e8d27-3f41-4c6a-a1d2-7e0c9b4f6a53",
            name="nginx-pod-service",
            description="An nginx web server running in a pod",
            plans=_default_plan("e1a7c3f5-9d2b-4e8f-b6a0-2c4d8f1e3b75"),
        ),
        ServiceType.NGINX_POD,
    ),
    "d83c6f10-7a2e-4b95-8c1f-4e6a0d9b2c86": (
        Service(
            id="d83c6f10-7a2e-4b95-8c1f-4e6a0d9b2c86",
            name="heketi-pod-service",
            description="A Heketi volume manager running in a pod",
            plans=_default_plan("f4b2d8e6-0c3a-4d71-9e5b-1a7c3f9d2e08"),
        ),
        ServiceType.HEKETI_POD,
    ),
}


def get_catalog() -> Catalog:
    """Return the catalog of offered services."""
    return Catalog(services=[service for service, _ in _SERVICES.values()])


def resolve_service_type(service_id: str) -> ServiceType:
    """Map a catalog service id to its service type.

    Raises:
        InvalidRequestError: Unknown service id
    """
    entry = _SERVICES.get(service_id)
    if entry is None:
        raise InvalidRequestError(f"unknown service_id {service_id!r}")
    return entry[1]

