"""Broker configuration using pydantic-settings.

Configuration hierarchy:
- KubernetesConfig: Cluster API connection settings
- RuntimeConfig: Backing resource naming and images
- LoggingConfig: Logging behavior
- ServerConfig: HTTP server settings
- BrokerConfig: Main config aggregating all sub-configs

Environment variable prefix: BROKER_
Example: BROKER_KUBE_HOST=https://10.0.0.1:443
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


class KubernetesConfig(BaseSettings):
    """Kubernetes API configuration.

    Defaults match the in-cluster service account mount, so a broker
    running as a pod needs no extra settings.
    """

    model_config = SettingsConfigDict(env_prefix="BROKER_KUBE_")

    host: str = Field(
        default="https://kubernetes.default.svc",
        description="Kubernetes API server URL",
    )
    token_path: str = Field(
        default=f"{_SERVICE_ACCOUNT_DIR}/token",
        description="Service account bearer token file",
    )
    ca_path: str = Field(
        default=f"{_SERVICE_ACCOUNT_DIR}/ca.crt",
        description="Cluster CA bundle",
    )
    verify_tls: bool = Field(default=True, description="Verify API server certificate")
    api_timeout: float = Field(default=30.0, description="API call timeout (seconds)")


class RuntimeConfig(BaseSettings):
    """Backing resource configuration.

    Every pod and secret created for an instance carries
    `<instance_label>=<instance_id>` so teardown and address lookup can
    select them without remembering names.
    """

    model_config = SettingsConfigDict(env_prefix="BROKER_RUNTIME_")

    instance_label: str = Field(
        default="userbroker/instance-id",
        description="Label key linking backing resources to an instance",
    )
    database_image: str = Field(default="docker.io/mongo:latest")
    nginx_image: str = Field(default="nginx:latest")
    heketi_image: str = Field(default="heketi/heketi:dev")
    image_pull_policy: str = Field(default="IfNotPresent")


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats for different environments:
    - text: Human-readable for local development
    - json: Structured logging for production (log aggregation)
    """

    model_config = SettingsConfigDict(env_prefix="BROKER_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="userbroker", description="Service identifier in logs")
    repeat_window: float = Field(
        default=5.0,
        description="Seconds during which a repeated event for one instance is dropped",
    )
    access_log: bool = Field(default=False, description="Emit uvicorn access logs")


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="BROKER_SERVER_")

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8005, description="Server port")


class BrokerConfig(BaseSettings):
    """Main broker configuration aggregating all sub-configs.

    Environment variable prefix: BROKER_
    Sub-configs use their own prefixes (BROKER_KUBE_, BROKER_RUNTIME_, etc.)
    """

    model_config = SettingsConfigDict(
        env_prefix="BROKER_",
        env_nested_delimiter="__",
    )

    kube: KubernetesConfig = Field(default_factory=KubernetesConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


@lru_cache
def get_broker_config() -> BrokerConfig:
    """Get cached broker configuration singleton."""
    return BrokerConfig()
