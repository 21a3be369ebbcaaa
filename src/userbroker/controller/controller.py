"""Instance lifecycle controller.

Owns the instance registry and dispatches each lifecycle call to the
strategy of the instance's service type.

Critical sections are kept to registry bookkeeping. Provisioner calls
run with the registry lock released; in-flight ids keep create and
remove atomic as seen by every other caller:
- create: reserve id -> provision -> commit (or release on failure)
- remove: hold id -> deprovision -> remove (or release on failure)
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from userbroker.controller.catalog import Catalog, get_catalog, resolve_service_type
from userbroker.controller.registry import InstanceRegistry
from userbroker.controller.strategies import StrategyRegistry
from userbroker.core.errors import BrokerError, ProvisioningFailureError
from userbroker.core.interfaces import ProvisionerError, ResourceProvisioner
from userbroker.core.logging_schema import LogEvent
from userbroker.core.models import ServiceInstance
from userbroker.core.schemas import (
    BindingRequest,
    CreateServiceBindingResponse,
    CreateServiceInstanceRequest,
    CreateServiceInstanceResponse,
    DeleteServiceInstanceResponse,
    ServiceInstanceView,
)
from userbroker.metrics import (
    BROKER_INSTANCES_TOTAL,
    BROKER_OPERATION_DURATION,
    BROKER_OPERATION_ERRORS,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _observe(operation: str) -> AsyncIterator[None]:
    start = time.monotonic()
    try:
        yield
    except BrokerError as e:
        BROKER_OPERATION_ERRORS.labels(operation=operation, error_code=e.code.value).inc()
        raise
    except Exception:
        BROKER_OPERATION_ERRORS.labels(operation=operation, error_code="INTERNAL").inc()
        raise
    finally:
        BROKER_OPERATION_DURATION.labels(operation=operation).observe(time.monotonic() - start)


class InstanceLifecycleController:
    """Service broker controller for user-provided and pod-backed services."""

    def __init__(
        self,
        provisioner: ResourceProvisioner,
        strategies: StrategyRegistry,
        registry: InstanceRegistry | None = None,
    ) -> None:
        self._provisioner = provisioner
        self._strategies = strategies
        self._registry = registry or InstanceRegistry()

    @property
    def registry(self) -> InstanceRegistry:
        return self._registry

    def catalog(self) -> Catalog:
        logger.debug("Controller catalog call")
        return get_catalog()

    async def create_service_instance(
        self,
        instance_id: str,
        request: CreateServiceInstanceRequest,
    ) -> CreateServiceInstanceResponse:
        """Provision a new instance.

        The id is reserved before provisioning so a concurrent create
        with the same id fails with AlreadyExists, and the instance only
        becomes visible once every provisioning step has succeeded.

        Raises:
            InstanceAlreadyExistsError: Id registered or being created
            InvalidRequestError: Unknown service, missing namespace, or an id
                unusable in resource names
            ProvisioningFailureError: Backing resources could not be created
        """
        async with _observe("create"):
            service_type = resolve_service_type(request.service_id)
            strategy = self._strategies.get(service_type)

            await self._registry.reserve(instance_id)
            try:
                instance = await strategy.provision(
                    ServiceInstance(
                        id=instance_id,
                        service_type=service_type,
                        service_id=request.service_id,
                        plan_id=request.plan_id,
                        location=request.location,
                    ),
                    request.parameters,
                )
            except BaseException as e:
                await asyncio.shield(self._registry.release(instance_id))
                logger.warning(
                    "Failed to create service instance",
                    extra={
                        "event": LogEvent.CREATE_FAILED,
                        "instance_id": instance_id,
                        "service_type": service_type,
                        "error": str(e),
                    },
                )
                raise

            await asyncio.shield(self._publish(instance))
            logger.info(
                "Created service instance",
                extra={
                    "event": LogEvent.INSTANCE_CREATED,
                    "instance_id": instance_id,
                    "service_type": service_type,
                    "location": instance.location,
                },
            )
            return CreateServiceInstanceResponse()

    async def get_service_instance(self, instance_id: str) -> ServiceInstanceView:
        """Return the serialized form of a registered instance.

        Raises:
            InstanceNotFoundError: Unknown id
        """
        async with _observe("get"):
            instance = await self._registry.get(instance_id)
            return ServiceInstanceView.from_instance(instance)

    async def remove_service_instance(self, instance_id: str) -> DeleteServiceInstanceResponse:
        """Deprovision and forget an instance.

        The registry entry is dropped only after teardown succeeds; on
        failure it stays so the caller can retry.

        Raises:
            InstanceNotFoundError: Unknown id
            OperationInProgressError: Another remove holds the id
            ProvisioningFailureError: Teardown failed; instance kept
        """
        async with _observe("remove"):
            instance = await self._registry.hold(instance_id)
            strategy = self._strategies.get(instance.service_type)
            try:
                await strategy.deprovision(instance)
            except BaseException as e:
                await asyncio.shield(self._registry.release(instance_id))
                logger.error(
                    "Failed to remove service instance",
                    extra={
                        "event": LogEvent.REMOVE_FAILED,
                        "instance_id": instance_id,
                        "service_type": instance.service_type,
                        "error": str(e),
                    },
                )
                raise

            await asyncio.shield(self._forget(instance_id))
            logger.info(
                "Removed service instance",
                extra={
                    "event": LogEvent.INSTANCE_REMOVED,
                    "instance_id": instance_id,
                    "service_type": instance.service_type,
                },
            )
            return DeleteServiceInstanceResponse()

    async def bind(
        self,
        instance_id: str,
        binding_id: str,
        request: BindingRequest,
    ) -> CreateServiceBindingResponse:
        """Issue credentials for an instance.

        Read-only for service types whose credential was fixed at create;
        otherwise the freshly built credential replaces the stored one.

        Raises:
            InstanceNotFoundError: Unknown id
            OperationInProgressError: Instance is being removed
            UnavailableError: Backing workload not ready
            ProvisioningFailureError: Address query failed
        """
        async with _observe("bind"):
            instance = await self._registry.get(instance_id, reject_in_flight=True)
            strategy = self._strategies.get(instance.service_type)
            try:
                credential = await strategy.bind(instance, binding_id, request.parameters)
            except BrokerError as e:
                logger.warning(
                    "Failed to bind service instance",
                    extra={
                        "event": LogEvent.BIND_FAILED,
                        "instance_id": instance_id,
                        "binding_id": binding_id,
                        "error_code": e.code.value,
                    },
                )
                raise

            if strategy.bind_mutates:
                await self._registry.set_credential(
                    instance_id, credential, generation=instance.generation
                )

            logger.info(
                "Bound service instance",
                extra={
                    "event": LogEvent.INSTANCE_BOUND,
                    "instance_id": instance_id,
                    "binding_id": binding_id,
                },
            )
            return CreateServiceBindingResponse(credentials=credential)

    async def unbind(self, instance_id: str, binding_id: str) -> None:
        """Release a binding. Succeeds for any registered instance.

        Raises:
            InstanceNotFoundError: Unknown id
        """
        async with _observe("unbind"):
            instance = await self._registry.get(instance_id)
            strategy = self._strategies.get(instance.service_type)
            await strategy.unbind(instance, binding_id)

    async def _publish(self, instance: ServiceInstance) -> None:
        # Shielded by callers: once provisioned, the instance must land in
        # the registry even if the request is cancelled.
        await self._registry.commit(instance)
        BROKER_INSTANCES_TOTAL.inc()

    async def _forget(self, instance_id: str) -> None:
        await self._registry.remove(instance_id)
        BROKER_INSTANCES_TOTAL.dec()

    async def debug(self) -> str:
        """Report the orchestration platform's server version."""
        logger.warning("External debug request")
        try:
            return await self._provisioner.server_version()
        except ProvisionerError as e:
            raise ProvisioningFailureError(f"failed to query server version: {e}") from e
