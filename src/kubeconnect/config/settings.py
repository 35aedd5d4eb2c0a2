"""Configuration management with Pydantic Settings.

Environment variables are loaded from:
1. Environment variables (highest priority)
2. .env file (development)
3. Defaults (lowest priority)
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


class CredentialBackend(str, Enum):
    """Where credentials are looked up."""

    MEMORY = "memory"
    KUBERNETES = "kubernetes"


class ConnectionSettings(BaseSettings):
    """Defaults applied when assembling a cluster connection."""

    model_config = SettingsConfigDict(env_prefix="K8S_")

    connect_timeout_seconds: int = Field(default=5, description="Connect timeout")
    read_timeout_seconds: int = Field(default=15, description="Read (request) timeout")
    oauth_client_id: str = Field(
        default="openshift-challenging-client",
        description="OAuth client used for the OpenShift challenge flow",
    )
    service_account_token_path: str = Field(
        default=DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH,
        description="Mounted service account token",
    )

    @field_validator("connect_timeout_seconds", "read_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Timeouts cannot be negative."""
        if v < 0:
            raise ValueError("Timeout must be zero or positive")
        return v


class CredentialStoreSettings(BaseSettings):
    """Credential store configuration."""

    model_config = SettingsConfigDict(env_prefix="CREDENTIALS_")

    backend: CredentialBackend = Field(
        default=CredentialBackend.MEMORY,
        description="Credential lookup backend",
    )
    namespace: str = Field(
        default="kubeconnect",
        description="Namespace holding credential Secrets",
    )
    label_selector: str = Field(
        default="kubeconnect.io/credential=true",
        description="Label selector identifying credential Secrets",
    )


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use the appropriate prefix (e.g., K8S_READ_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="kubeconnect", description="Application name")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        alias="ENV",
        description="Deployment environment",
    )

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Logging format")

    # Nested settings
    connection: ConnectionSettings = Field(default_factory=ConnectionSettings)
    credentials: CredentialStoreSettings = Field(default_factory=CredentialStoreSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing environment variables.
    """
    return Settings()
