"""Kubernetes resource provisioner.

Creates one pod and one secret per instance, both labelled with the
instance id so they can be found again without stored names.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

import httpx

from userbroker.core.interfaces import (
    ProvisionerError,
    ResourceKind,
    ResourceProvisioner,
    ResourceRef,
    WorkloadAddress,
    WorkloadNotReadyError,
)
from userbroker.core.logging_schema import LogEvent
from userbroker.infra import ContainerPort, PodAPI, PodConfig, SecretAPI, SecretConfig, VersionAPI
from userbroker.metrics import BROKER_KUBE_DURATION, BROKER_KUBE_ERRORS
from userbroker.runtimes.kubernetes.naming import ResourceNaming

if TYPE_CHECKING:
    from userbroker.config import RuntimeConfig
    from userbroker.core.models import WorkloadTemplate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KubernetesProvisioner(ResourceProvisioner):
    """ResourceProvisioner backed by the Kubernetes core/v1 API."""

    def __init__(
        self,
        config: RuntimeConfig,
        pods: PodAPI | None = None,
        secrets: SecretAPI | None = None,
        version: VersionAPI | None = None,
    ) -> None:
        self._config = config
        self._naming = ResourceNaming(config)
        self._pods = pods or PodAPI()
        self._secrets = secrets or SecretAPI()
        self._version = version or VersionAPI()

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        """Await a Kubernetes API call, translating client errors."""
        start = time.monotonic()
        try:
            return await call
        except httpx.HTTPStatusError as e:
            BROKER_KUBE_ERRORS.labels(operation=operation, error_type="api_error").inc()
            raise ProvisionerError(
                f"{operation} failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            BROKER_KUBE_ERRORS.labels(operation=operation, error_type="connection").inc()
            raise ProvisionerError(f"{operation} failed: {e}") from e
        finally:
            BROKER_KUBE_DURATION.labels(operation=operation).observe(time.monotonic() - start)

    async def create_secret(
        self,
        instance_id: str,
        location: str,
        template: WorkloadTemplate,
        data: dict[str, str],
    ) -> ResourceRef:
        config = SecretConfig(
            name=template.secret_name(instance_id),
            namespace=location,
            labels=self._naming.labels(instance_id),
            string_data=data,
        )
        await self._call("secret_create", self._secrets.create(config))
        logger.info(
            "Created instance secret",
            extra={
                "event": LogEvent.SECRET_CREATED,
                "instance_id": instance_id,
                "secret": config.name,
                "namespace": location,
            },
        )
        return ResourceRef(kind=ResourceKind.SECRET, name=config.name, namespace=location)

    async def create_workload(
        self,
        instance_id: str,
        location: str,
        template: WorkloadTemplate,
    ) -> ResourceRef:
        config = PodConfig(
            name=template.pod_name(instance_id),
            namespace=location,
            labels=self._naming.labels(instance_id),
            container_name=template.name,
            image=template.image,
            image_pull_policy=self._config.image_pull_policy,
            command=list(template.command),
            args=list(template.args),
            ports=[ContainerPort(name=template.port_name, container_port=template.port)],
            env_from_secret=template.secret_name(instance_id),
        )
        await self._call("pod_create", self._pods.create(config))
        logger.info(
            "Provisioned instance pod",
            extra={
                "event": LogEvent.POD_CREATED,
                "instance_id": instance_id,
                "pod": config.name,
                "namespace": location,
                "image": config.image,
            },
        )
        return ResourceRef(kind=ResourceKind.POD, name=config.name, namespace=location)

    async def delete_resource(self, ref: ResourceRef) -> None:
        if ref.kind == ResourceKind.POD:
            await self._call("pod_delete", self._pods.delete(ref.namespace, ref.name))
            event = LogEvent.POD_DELETED
        else:
            await self._call("secret_delete", self._secrets.delete(ref.namespace, ref.name))
            event = LogEvent.SECRET_DELETED
        logger.info(
            "Deleted %s %s",
            ref.kind,
            ref.name,
            extra={"event": event, "namespace": ref.namespace},
        )

    async def delete_instance_resources(self, instance_id: str, location: str) -> None:
        """Delete pods then secrets by label; raise after both attempts."""
        selector = self._naming.label_selector(instance_id)
        errors: list[ProvisionerError] = []

        try:
            await self._call("pod_delete", self._pods.delete_collection(location, selector))
            logger.info(
                "Deleted instance pods",
                extra={"event": LogEvent.POD_DELETED, "instance_id": instance_id},
            )
        except ProvisionerError as e:
            logger.error(
                "Error deleting instance pods",
                extra={"event": LogEvent.REMOVE_FAILED, "instance_id": instance_id, "error": str(e)},
            )
            errors.append(e)

        try:
            await self._call("secret_delete", self._secrets.delete_collection(location, selector))
            logger.info(
                "Deleted instance secrets",
                extra={"event": LogEvent.SECRET_DELETED, "instance_id": instance_id},
            )
        except ProvisionerError as e:
            logger.error(
                "Error deleting instance secrets",
                extra={"event": LogEvent.REMOVE_FAILED, "instance_id": instance_id, "error": str(e)},
            )
            errors.append(e)

        if errors:
            raise ProvisionerError(
                f"errors deprovisioning instance {instance_id}: "
                + "; ".join(str(e) for e in errors)
            ) from errors[0]

    async def get_workload_address(self, instance_id: str, location: str) -> WorkloadAddress:
        pods = await self._call(
            "pod_list", self._pods.list(location, self._naming.label_selector(instance_id))
        )
        if not pods:
            raise WorkloadNotReadyError(instance_id, "no pod found")

        pod = pods[0]
        status = pod.get("status", {})
        phase = status.get("phase", "Unknown")
        pod_ip = status.get("podIP")
        if phase != "Running" or not pod_ip:
            raise WorkloadNotReadyError(instance_id, f"pod phase {phase}")

        try:
            port = pod["spec"]["containers"][0]["ports"][0]["containerPort"]
        except (KeyError, IndexError) as e:
            raise ProvisionerError(f"pod for instance {instance_id} exposes no port") from e
        return WorkloadAddress(host=pod_ip, port=int(port))

    async def server_version(self) -> str:
        info = await self._call("version", self._version.get())
        return info.get("gitVersion", "unknown")
