"""Workload templates for pod-backed service types."""

from userbroker.config import RuntimeConfig
from userbroker.core.models import ServiceType, WorkloadTemplate


def build_templates(config: RuntimeConfig) -> dict[ServiceType, WorkloadTemplate]:
    """Build one template per pod-backed service type."""
    return {
        ServiceType.DATABASE_POD: WorkloadTemplate(
            name="mongo",
            image=config.database_image,
            port_name="mongodb",
            port=27017,
            scheme="mongodb",
            secret_defaults={"MONGO_INITDB_ROOT_USERNAME": "admin"},
            generated_secret_keys=("MONGO_INITDB_ROOT_PASSWORD",),
        ),
        ServiceType.NGINX_POD: WorkloadTemplate(
            name="nginx",
            image=config.nginx_image,
            port_name="nginx",
            port=80,
            scheme="http",
        ),
        ServiceType.HEKETI_POD: WorkloadTemplate(
            name="heketi",
            image=config.heketi_image,
            port_name="heketi",
            port=8080,
            scheme="http",
            secret_defaults={"HEKETI_EXECUTOR": "mock"},
            generated_secret_keys=("HEKETI_ADMIN_KEY",),
        ),
    }
