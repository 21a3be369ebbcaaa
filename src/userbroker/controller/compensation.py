"""Compensating actions for multi-step provisioning.

Usage:
    async with Compensation("create", instance_id) as saga:
        secret = await provisioner.create_secret(...)
        saga.add(f"delete secret {secret.name}", lambda: provisioner.delete_resource(secret))
        await provisioner.create_workload(...)

If the block raises, registered actions run newest first and the
original exception propagates. A failing action is logged and the
remaining actions still run.
"""

import logging
from collections.abc import Awaitable, Callable
from types import TracebackType

from userbroker.core.logging_schema import LogEvent

logger = logging.getLogger(__name__)

CompensatingAction = Callable[[], Awaitable[None]]


class Compensation:
    """Stack of undo actions accumulated during forward steps."""

    def __init__(self, operation: str, instance_id: str) -> None:
        self._operation = operation
        self._instance_id = instance_id
        self._actions: list[tuple[str, CompensatingAction]] = []

    def __len__(self) -> int:
        return len(self._actions)

    def add(self, description: str, action: CompensatingAction) -> None:
        self._actions.append((description, action))

    async def rollback(self) -> list[Exception]:
        """Run every registered action in reverse order.

        Returns:
            Exceptions raised by failed actions, newest step first.
        """
        if not self._actions:
            return []

        logger.warning(
            "Rolling back partial %s",
            self._operation,
            extra={
                "event": LogEvent.ROLLBACK_STARTED,
                "instance_id": self._instance_id,
                "steps": len(self._actions),
            },
        )
        errors: list[Exception] = []
        while self._actions:
            description, action = self._actions.pop()
            try:
                await action()
            except Exception as e:
                errors.append(e)
                logger.error(
                    "Rollback step failed: %s",
                    description,
                    extra={
                        "event": LogEvent.ROLLBACK_STEP_FAILED,
                        "instance_id": self._instance_id,
                        "error": str(e),
                    },
                )
        logger.info(
            "Rollback complete",
            extra={
                "event": LogEvent.ROLLBACK_COMPLETED,
                "instance_id": self._instance_id,
                "failed_steps": len(errors),
            },
        )
        return errors

    async def __aenter__(self) -> "Compensation":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            await self.rollback()
        else:
            self._actions.clear()
        return False
