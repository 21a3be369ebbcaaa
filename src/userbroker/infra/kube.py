"""Kubernetes API client for the broker.

Provides async access to pods, secrets, and the server version endpoint
over plain REST. Authenticates with the pod's service account token when
one is mounted; without a token it talks to `host` unauthenticated,
which suits `kubectl proxy` during local development.
"""

import logging
import os
import ssl

import httpx
from pydantic import BaseModel

from userbroker.config import KubernetesConfig, get_broker_config

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models
# =============================================================================


class ContainerPort(BaseModel):
    """Named container port."""

    name: str
    container_port: int

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        return {"name": self.name, "containerPort": self.container_port}


class PodConfig(BaseModel):
    """Single-container pod definition for creation."""

    name: str
    namespace: str
    labels: dict[str, str] = {}
    container_name: str
    image: str
    image_pull_policy: str = "IfNotPresent"
    command: list[str] = []
    args: list[str] = []
    ports: list[ContainerPort] = []
    env_from_secret: str | None = None

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        """Convert to Kubernetes Pod manifest."""
        container: dict = {
            "name": self.container_name,
            "image": self.image,
            "imagePullPolicy": self.image_pull_policy,
            "ports": [port.to_api() for port in self.ports],
        }
        if self.command:
            container["command"] = self.command
        if self.args:
            container["args"] = self.args
        if self.env_from_secret:
            container["envFrom"] = [
                {"secretRef": {"name": self.env_from_secret, "optional": False}}
            ]
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": self.labels,
            },
            "spec": {"containers": [container]},
        }


class SecretConfig(BaseModel):
    """Opaque secret definition for creation."""

    name: str
    namespace: str
    labels: dict[str, str] = {}
    string_data: dict[str, str] = {}

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        """Convert to Kubernetes Secret manifest."""
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "type": "Opaque",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": self.labels,
            },
            "stringData": self.string_data,
        }


# =============================================================================
# Kubernetes Client (Singleton)
# =============================================================================


class KubeClient:
    """Async Kubernetes API client."""

    def __init__(self, config: KubernetesConfig | None = None) -> None:
        self._config = config or get_broker_config().kube
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if os.path.exists(self._config.token_path):
            with open(self._config.token_path) as f:
                headers["Authorization"] = f"Bearer {f.read().strip()}"
        return headers

    def _verify(self) -> ssl.SSLContext | bool:
        if not self._config.verify_tls:
            return False
        if os.path.exists(self._config.ca_path):
            return ssl.create_default_context(cafile=self._config.ca_path)
        return True

    def _create_client(self) -> httpx.AsyncClient:
        """Create a new HTTP client."""
        return httpx.AsyncClient(
            base_url=self._config.host,
            headers=self._headers(),
            verify=self._verify(),
            timeout=self._config.api_timeout,
        )

    async def get(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = self._create_client()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


# Global singleton
_kube_client: KubeClient | None = None


def get_kube_client() -> KubeClient:
    """Get the global Kubernetes client singleton."""
    global _kube_client
    if _kube_client is None:
        _kube_client = KubeClient()
    return _kube_client


async def close_kube() -> None:
    """Close the global Kubernetes client."""
    global _kube_client
    if _kube_client:
        await _kube_client.close()
        _kube_client = None


# =============================================================================
# Pod API
# =============================================================================


class PodAPI:
    """Kubernetes core/v1 Pod operations."""

    def __init__(self, client: KubeClient | None = None) -> None:
        self._kube = client or get_kube_client()

    async def create(self, config: PodConfig) -> dict:
        """Create a pod and return the stored object."""
        client = await self._kube.get()
        resp = await client.post(
            f"/api/v1/namespaces/{config.namespace}/pods",
            json=config.to_api(),
        )
        resp.raise_for_status()
        logger.info("Created pod: %s/%s", config.namespace, config.name)
        return resp.json()

    async def list(self, namespace: str, label_selector: str) -> list[dict]:
        """List pods matching a label selector."""
        client = await self._kube.get()
        resp = await client.get(
            f"/api/v1/namespaces/{namespace}/pods",
            params={"labelSelector": label_selector},
        )
        resp.raise_for_status()
        return resp.json().get("items", [])

    async def delete(self, namespace: str, name: str) -> None:
        """Delete a pod (idempotent)."""
        client = await self._kube.get()
        resp = await client.delete(f"/api/v1/namespaces/{namespace}/pods/{name}")
        if resp.status_code == 404:
            logger.debug("Pod not found: %s/%s", namespace, name)
            return
        resp.raise_for_status()
        logger.info("Deleted pod: %s/%s", namespace, name)

    async def delete_collection(self, namespace: str, label_selector: str) -> None:
        """Delete every pod matching a label selector (idempotent)."""
        client = await self._kube.get()
        resp = await client.delete(
            f"/api/v1/namespaces/{namespace}/pods",
            params={"labelSelector": label_selector},
        )
        if resp.status_code == 404:
            logger.debug("Namespace not found: %s", namespace)
            return
        resp.raise_for_status()
        logger.info("Deleted pods: %s (%s)", namespace, label_selector)


# =============================================================================
# Secret API
# =============================================================================


class SecretAPI:
    """Kubernetes core/v1 Secret operations."""

    def __init__(self, client: KubeClient | None = None) -> None:
        self._kube = client or get_kube_client()

    async def create(self, config: SecretConfig) -> dict:
        """Create a secret and return the stored object."""
        client = await self._kube.get()
        resp = await client.post(
            f"/api/v1/namespaces/{config.namespace}/secrets",
            json=config.to_api(),
        )
        resp.raise_for_status()
        logger.info("Created secret: %s/%s", config.namespace, config.name)
        return resp.json()

    async def delete(self, namespace: str, name: str) -> None:
        """Delete a secret (idempotent)."""
        client = await self._kube.get()
        resp = await client.delete(f"/api/v1/namespaces/{namespace}/secrets/{name}")
        if resp.status_code == 404:
            logger.debug("Secret not found: %s/%s", namespace, name)
            return
        resp.raise_for_status()
        logger.info("Deleted secret: %s/%s", namespace, name)

    async def delete_collection(self, namespace: str, label_selector: str) -> None:
        """Delete every secret matching a label selector (idempotent)."""
        client = await self._kube.get()
        resp = await client.delete(
            f"/api/v1/namespaces/{namespace}/secrets",
            params={"labelSelector": label_selector},
        )
        if resp.status_code == 404:
            logger.debug("Namespace not found: %s", namespace)
            return
        resp.raise_for_status()
        logger.info("Deleted secrets: %s (%s)", namespace, label_selector)


# =============================================================================
# Version API
# =============================================================================


class VersionAPI:
    """Kubernetes server version endpoint."""

    def __init__(self, client: KubeClient | None = None) -> None:
        self._kube = client or get_kube_client()

    async def get(self) -> dict:
        client = await self._kube.get()
        resp = await client.get("/version")
        resp.raise_for_status()
        return resp.json()
