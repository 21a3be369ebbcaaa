"""Per-service-type provisioning strategies.

Each service type registers one ServiceStrategy. The controller never
branches on the type itself; it looks the strategy up and calls it.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from typing import Any

from userbroker.config import RuntimeConfig
from userbroker.controller.compensation import Compensation
from userbroker.controller.templates import build_templates
from userbroker.core.errors import (
    InvalidRequestError,
    ProvisioningFailureError,
    UnavailableError,
)
from userbroker.core.interfaces import (
    ProvisionerError,
    ResourceProvisioner,
    WorkloadNotReadyError,
)
from userbroker.core.logging_schema import LogEvent
from userbroker.core.models import (
    DNS_LABEL_MAX_LENGTH,
    BackingResourceRef,
    Credential,
    ServiceInstance,
    ServiceType,
    WorkloadTemplate,
    is_dns_label,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_CREDENTIAL: Credential = {
    "special-key-1": "special-value-1",
    "special-key-2": "special-value-2",
}


class ServiceStrategy(ABC):
    """Provisioning behavior of one service type."""

    service_type: ServiceType

    # True when bind derives a new credential that must be stored;
    # False when bind only reads what provision captured.
    bind_mutates: bool = False

    @abstractmethod
    async def provision(
        self, instance: ServiceInstance, parameters: dict[str, Any]
    ) -> ServiceInstance:
        """Create backing state and return the fully populated instance."""
        ...

    @abstractmethod
    async def deprovision(self, instance: ServiceInstance) -> None:
        """Release backing state. Already released counts as success."""
        ...

    @abstractmethod
    async def bind(
        self, instance: ServiceInstance, binding_id: str, parameters: dict[str, Any]
    ) -> Credential:
        ...

    @abstractmethod
    async def unbind(self, instance: ServiceInstance, binding_id: str) -> None:
        ...


class UserProvidedStrategy(ServiceStrategy):
    """Credential supplied by the caller at create time; nothing external."""

    service_type = ServiceType.USER_PROVIDED

    async def provision(
        self, instance: ServiceInstance, parameters: dict[str, Any]
    ) -> ServiceInstance:
        credential = self._credential_from(instance.id, parameters)
        return instance.model_copy(update={"credential": credential})

    async def deprovision(self, instance: ServiceInstance) -> None:
        return None

    async def bind(
        self, instance: ServiceInstance, binding_id: str, parameters: dict[str, Any]
    ) -> Credential:
        return dict(instance.credential or {})

    async def unbind(self, instance: ServiceInstance, binding_id: str) -> None:
        # Bindings are not persisted, so there is nothing to release.
        return None

    @staticmethod
    def _credential_from(instance_id: str, parameters: dict[str, Any]) -> Credential:
        supplied = parameters.get("credentials")
        if supplied is None:
            return dict(PLACEHOLDER_CREDENTIAL)
        if isinstance(supplied, dict) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in supplied.items()
        ):
            return dict(supplied)
        logger.warning(
            "Ignoring malformed credentials parameter",
            extra={
                "event": LogEvent.CREDENTIAL_FALLBACK,
                "instance_id": instance_id,
                "parameter_type": type(supplied).__name__,
            },
        )
        return dict(PLACEHOLDER_CREDENTIAL)


class PodStrategy(ServiceStrategy):
    """One pod plus one credential secret in the caller's namespace."""

    bind_mutates = True

    def __init__(
        self,
        service_type: ServiceType,
        template: WorkloadTemplate,
        provisioner: ResourceProvisioner,
    ) -> None:
        self.service_type = service_type
        self._template = template
        self._provisioner = provisioner

    async def provision(
        self, instance: ServiceInstance, parameters: dict[str, Any]
    ) -> ServiceInstance:
        """Create the secret, then the pod.

        A failed pod creation deletes the secret before the error
        surfaces.

        Raises:
            InvalidRequestError: No namespace, or an id unusable in resource names
            ProvisioningFailureError: Any cluster call failed
        """
        location = instance.location
        if not location:
            raise InvalidRequestError("Namespace not detected in request")
        if not is_dns_label(instance.id):
            raise InvalidRequestError(
                f"instance id {instance.id!r} must be a lowercase RFC 1123 label "
                f"of at most {DNS_LABEL_MAX_LENGTH} characters"
            )

        try:
            async with Compensation("create", instance.id) as saga:
                secret = await self._provisioner.create_secret(
                    instance.id, location, self._template, self._secret_data()
                )
                saga.add(
                    f"delete secret {secret.name}",
                    lambda: self._provisioner.delete_resource(secret),
                )
                pod = await self._provisioner.create_workload(
                    instance.id, location, self._template
                )
        except ProvisionerError as e:
            raise ProvisioningFailureError(
                f"failed to provision instance {instance.id}: {e}"
            ) from e

        ref = BackingResourceRef(namespace=location, pod_name=pod.name, secret_name=secret.name)
        return instance.model_copy(update={"backing_resource_ref": ref})

    async def deprovision(self, instance: ServiceInstance) -> None:
        try:
            await self._provisioner.delete_instance_resources(instance.id, instance.location)
        except ProvisionerError as e:
            raise ProvisioningFailureError(
                f"failed to deprovision instance {instance.id}: {e}"
            ) from e

    async def bind(
        self, instance: ServiceInstance, binding_id: str, parameters: dict[str, Any]
    ) -> Credential:
        """Build a credential pointing at the workload's current address.

        Raises:
            UnavailableError: Workload not running or has no address yet
            ProvisioningFailureError: Address query failed
        """
        try:
            address = await self._provisioner.get_workload_address(
                instance.id, instance.location
            )
        except WorkloadNotReadyError as e:
            raise UnavailableError(str(e)) from e
        except ProvisionerError as e:
            raise ProvisioningFailureError(
                f"failed to query instance {instance.id}: {e}"
            ) from e

        credential: Credential = {
            "host": address.host,
            "port": str(address.port),
            "uri": f"{self._template.scheme}://{address.host}:{address.port}",
        }
        if instance.backing_resource_ref is not None:
            credential["secret_name"] = instance.backing_resource_ref.secret_name
        return credential

    async def unbind(self, instance: ServiceInstance, binding_id: str) -> None:
        # TODO: revoke per-binding database users once bind creates them.
        logger.info(
            "%s unbind has no teardown",
            self.service_type,
            extra={
                "event": LogEvent.INSTANCE_UNBOUND,
                "instance_id": instance.id,
                "binding_id": binding_id,
            },
        )

    def _secret_data(self) -> dict[str, str]:
        data = dict(self._template.secret_defaults)
        for key in self._template.generated_secret_keys:
            data[key] = secrets.token_urlsafe(24)
        return data


class StrategyRegistry:
    """Service type -> strategy lookup."""

    def __init__(self, strategies: list[ServiceStrategy] | None = None) -> None:
        self._strategies: dict[ServiceType, ServiceStrategy] = {}
        for strategy in strategies or []:
            self.register(strategy)

    def register(self, strategy: ServiceStrategy) -> None:
        self._strategies[strategy.service_type] = strategy

    def get(self, service_type: ServiceType) -> ServiceStrategy:
        """Look up a strategy.

        Raises:
            InvalidRequestError: No strategy registered for the type
        """
        strategy = self._strategies.get(service_type)
        if strategy is None:
            raise InvalidRequestError(f"service type {service_type} is not supported")
        return strategy

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._strategies


def default_strategies(
    provisioner: ResourceProvisioner, config: RuntimeConfig
) -> StrategyRegistry:
    """Register the user-provided strategy and one PodStrategy per template."""
    registry = StrategyRegistry([UserProvidedStrategy()])
    for service_type, template in build_templates(config).items():
        registry.register(PodStrategy(service_type, template, provisioner))
    return registry
