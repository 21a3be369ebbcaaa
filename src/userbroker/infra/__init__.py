"""Broker infrastructure layer."""

from userbroker.infra.kube import (
    ContainerPort,
    KubeClient,
    PodAPI,
    PodConfig,
    SecretAPI,
    SecretConfig,
    VersionAPI,
    close_kube,
    get_kube_client,
)

__all__ = [
    "ContainerPort",
    "KubeClient",
    "PodAPI",
    "PodConfig",
    "SecretAPI",
    "SecretConfig",
    "VersionAPI",
    "close_kube",
    "get_kube_client",
]
