"""Instance lifecycle controller."""

from userbroker.controller.catalog import Catalog, get_catalog, resolve_service_type
from userbroker.controller.compensation import Compensation
from userbroker.controller.controller import InstanceLifecycleController
from userbroker.controller.lock import ReadWriteLock
from userbroker.controller.registry import InstanceRegistry
from userbroker.controller.strategies import (
    PodStrategy,
    ServiceStrategy,
    StrategyRegistry,
    UserProvidedStrategy,
    default_strategies,
)

__all__ = [
    "Catalog",
    "Compensation",
    "InstanceLifecycleController",
    "InstanceRegistry",
    "PodStrategy",
    "ReadWriteLock",
    "ServiceStrategy",
    "StrategyRegistry",
    "UserProvidedStrategy",
    "default_strategies",
    "get_catalog",
    "resolve_service_type",
]
