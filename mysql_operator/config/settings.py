"""
Operator configuration using Pydantic Settings.
Loads configuration from environment variables with validation.

The options object is built once at process start and passed explicitly to
the defaulting engine, the topology resolver and the reconciler.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OperatorOptions(BaseSettings):
    """Main operator options with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="MYSQL_OPERATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="mysql-operator", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: str = Field(default="development", description="Environment (development/staging/production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Images
    mysql_image: str = Field(default="percona", description="MySQL image repository")
    mysql_image_tag: str = Field(default="5.7", description="Default MySQL version (image tag)")
    helper_image: str = Field(
        default="quay.io/presslabs/mysql-helper:latest", description="Helper (sidecar) image"
    )
    metrics_exporter_image: str = Field(
        default="prom/mysqld-exporter:latest", description="Metrics exporter image"
    )
    image_pull_policy: str = Field(default="IfNotPresent", description="Default image pull policy")

    # Orchestrator (topology authority)
    orchestrator_uri: Optional[str] = Field(
        default=None, description="Orchestrator API address, e.g. http://orchestrator/api"
    )
    orchestrator_timeout_seconds: float = Field(
        default=10.0, gt=0, le=120, description="Timeout for a single orchestrator request"
    )

    # Kubernetes
    kubeconfig_path: Optional[str] = Field(
        default=None, description="Path to kubeconfig file (None for in-cluster)"
    )
    k8s_in_cluster: bool = Field(default=False, description="Running inside Kubernetes cluster")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment."""
        valid_envs = ["development", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v.lower()

    @field_validator("image_pull_policy")
    @classmethod
    def validate_image_pull_policy(cls, v: str) -> str:
        """Validate image pull policy."""
        valid_policies = ["Always", "IfNotPresent", "Never"]
        if v not in valid_policies:
            raise ValueError(f"Image pull policy must be one of {valid_policies}")
        return v

    @field_validator("orchestrator_uri")
    @classmethod
    def normalize_orchestrator_uri(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty address as 'not configured'."""
        if v is None or not v.strip():
            return None
        return v.strip().rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    def mysql_image_for(self, version: str) -> str:
        """Compose the MySQL image reference for a given version."""
        return f"{self.mysql_image}:{version}"


@lru_cache(maxsize=1)
def load_options() -> OperatorOptions:
    """
    Build the operator options once per process.

    Business logic never calls this; the entrypoint does and hands the
    result down.
    """
    return OperatorOptions()
