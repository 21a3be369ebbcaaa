"""Broker API request and response models.

Field names follow the Open Service Broker v2 wire format.
"""

from typing import Any

from pydantic import BaseModel, Field

from userbroker.core.models import Credential, ServiceInstance, ServiceType


class CreateServiceInstanceRequest(BaseModel):
    """Provision request body."""

    service_id: str
    plan_id: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)

    @property
    def location(self) -> str:
        """Target namespace from the request context, then parameters."""
        namespace = self.context.get("namespace") or self.parameters.get("namespace")
        return namespace if isinstance(namespace, str) else ""


class CreateServiceInstanceResponse(BaseModel):
    """Provision response body."""

    dashboard_url: str | None = None


class DeleteServiceInstanceResponse(BaseModel):
    """Deprovision response body (always empty)."""


class BindingRequest(BaseModel):
    """Bind request body."""

    service_id: str = ""
    plan_id: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class CreateServiceBindingResponse(BaseModel):
    """Bind response body."""

    credentials: Credential


class ServiceInstanceView(BaseModel):
    """Canonical serialized form of a registered instance."""

    instance_id: str
    service_id: str
    plan_id: str
    service_type: ServiceType
    location: str
    credentials: Credential | None
    pod_name: str | None = None
    secret_name: str | None = None

    @classmethod
    def from_instance(cls, instance: ServiceInstance) -> "ServiceInstanceView":
        ref = instance.backing_resource_ref
        return cls(
            instance_id=instance.id,
            service_id=instance.service_id,
            plan_id=instance.plan_id,
            service_type=instance.service_type,
            location=instance.location,
            credentials=instance.credential,
            pod_name=ref.pod_name if ref else None,
            secret_name=ref.secret_name if ref else None,
        )
