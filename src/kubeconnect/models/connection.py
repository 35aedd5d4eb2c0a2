"""Connection configuration handed to the Kubernetes client layer."""

from enum import Enum

from pydantic import Field, SecretStr, field_validator, model_validator

from .base import KubeConnectBaseModel


class AuthMode(str, Enum):
    """Which authentication group a connection config carries."""

    NONE = "NONE"
    TOKEN = "TOKEN"
    BASIC = "BASIC"
    CLIENT_CERTIFICATE = "CLIENT_CERTIFICATE"


class ConnectionConfig(KubeConnectBaseModel):
    """Fully assembled parameters for a cluster API connection.

    At most one authentication group is set: ``oauth_token``,
    ``username``/``password``, or the ``client_*`` certificate fields.
    """

    master_url: str = Field(min_length=1, description="API server URL")
    namespace: str | None = Field(default=None, description="Default namespace (None = client default)")
    request_timeout_ms: int = Field(ge=0, description="Read timeout in milliseconds")
    connection_timeout_ms: int = Field(ge=0, description="Connect timeout in milliseconds")

    # TLS
    trust_certs: bool = Field(default=False, description="Trust any server certificate")
    ca_cert_data: str | None = Field(default=None, description="CA certificate PEM")

    # Token auth
    oauth_token: SecretStr | None = None
    # Basic auth
    username: str | None = None
    password: SecretStr | None = None
    # Client certificate auth
    client_cert_data: str | None = Field(default=None, description="Base64 DER client certificate")
    client_key_data: SecretStr | None = Field(default=None, description="Base64 PEM private key")
    client_key_passphrase: SecretStr | None = None

    @field_validator("namespace")
    @classmethod
    def normalize_namespace(cls, v: str | None) -> str | None:
        return v or None

    @model_validator(mode="after")
    def validate_single_auth_group(self) -> "ConnectionConfig":
        groups = [
            self.oauth_token is not None,
            self.username is not None or self.password is not None,
            self.client_cert_data is not None
            or self.client_key_data is not None
            or self.client_key_passphrase is not None,
        ]
        if sum(groups) > 1:
            raise ValueError("Only one authentication method may be configured")
        return self

    @property
    def auth_mode(self) -> AuthMode:
        if self.oauth_token is not None:
            return AuthMode.TOKEN
        if self.username is not None or self.password is not None:
            return AuthMode.BASIC
        if self.client_cert_data is not None or self.client_key_data is not None:
            return AuthMode.CLIENT_CERTIFICATE
        return AuthMode.NONE

    @property
    def request_timeout(self) -> tuple[float, float]:
        """(connect, read) timeout in seconds, as the Kubernetes client expects."""
        return self.connection_timeout_ms / 1000, self.request_timeout_ms / 1000
