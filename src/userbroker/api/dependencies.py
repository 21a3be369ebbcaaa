"""API dependencies for dependency injection."""

from userbroker.config import get_broker_config
from userbroker.controller import InstanceLifecycleController, default_strategies
from userbroker.infra import close_kube
from userbroker.runtimes import KubernetesProvisioner

# Singleton controller instance
_controller: InstanceLifecycleController | None = None


def init_controller() -> None:
    """Initialize controller singleton.

    Must be called during app startup.
    """
    global _controller
    config = get_broker_config()
    provisioner = KubernetesProvisioner(config.runtime)
    _controller = InstanceLifecycleController(
        provisioner=provisioner,
        strategies=default_strategies(provisioner, config.runtime),
    )


async def close_controller() -> None:
    """Drop the controller and release the Kubernetes client."""
    global _controller
    _controller = None
    await close_kube()


def get_controller() -> InstanceLifecycleController:
    """Get controller singleton.

    Raises:
        RuntimeError: If called before init_controller().
    """
    if _controller is None:
        raise RuntimeError("Controller not initialized. Call init_controller() first.")
    return _controller


def reset_controller() -> None:
    """Reset controller singleton (for testing)."""
    global _controller
    _controller = None
