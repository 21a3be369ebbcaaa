"""Broker domain models."""

import re
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel

Credential = dict[str, str]

# RFC 1123 label: the id becomes part of resource names and a label value.
_DNS_LABEL = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
DNS_LABEL_MAX_LENGTH = 63


def is_dns_label(value: str) -> bool:
    return len(value) <= DNS_LABEL_MAX_LENGTH and _DNS_LABEL.fullmatch(value) is not None


class ServiceType(StrEnum):
    """Service definitions an instance can be created from."""

    USER_PROVIDED = "user-provided"
    DATABASE_POD = "database-pod"
    NGINX_POD = "nginx-pod"
    HEKETI_POD = "heketi-pod"


class BackingResourceRef(BaseModel):
    """Names of the cluster resources backing one instance."""

    namespace: str
    pod_name: str
    secret_name: str

    model_config = {"frozen": True}


class ServiceInstance(BaseModel):
    """One provisioned instance, keyed by its caller-supplied id."""

    id: str
    service_type: ServiceType
    service_id: str = ""
    plan_id: str = ""
    location: str = ""
    credential: Credential | None = None
    backing_resource_ref: BackingResourceRef | None = None
    # Assigned by the registry on commit; a re-created id gets a new one.
    generation: int = 0


@dataclass(frozen=True)
class WorkloadTemplate:
    """Shape of a pod-backed service: one container plus one secret.

    The secret is exposed to the container environment, so its keys
    become environment variables of the workload. Keys listed in
    `generated_secret_keys` get a random value per instance.
    """

    name: str
    image: str
    port_name: str
    port: int
    scheme: str
    command: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    secret_defaults: dict[str, str] = field(default_factory=dict)
    generated_secret_keys: tuple[str, ...] = ()

    def pod_name(self, instance_id: str) -> str:
        return f"{self.name}-{instance_id}"

    def secret_name(self, instance_id: str) -> str:
        return f"{self.name}-{instance_id}-secret"
