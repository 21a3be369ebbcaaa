"""Resource labelling for the Kubernetes runtime."""

from userbroker.config import RuntimeConfig


class ResourceNaming:
    """Centralized label conventions for instance resources."""

    def __init__(self, config: RuntimeConfig) -> None:
        self._label = config.instance_label

    def labels(self, instance_id: str) -> dict[str, str]:
        return {self._label: instance_id}

    def label_selector(self, instance_id: str) -> str:
        return f"{self._label}={instance_id}"
