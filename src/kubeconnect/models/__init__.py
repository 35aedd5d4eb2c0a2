"""Data models for kubeconnect.

All models follow these conventions:
- Immutable once constructed
- Field names: lowercase snake_case
- Enums: uppercase SNAKE_CASE
- Secrets held as SecretStr, never rendered in repr or logs
"""

# Base
from .base import KubeConnectBaseModel

# Connection output
from .connection import AuthMode, ConnectionConfig

# Credentials
from .credentials import (
    BaseCredential,
    BearerTokenCredential,
    CertificateCredential,
    Credential,
    CredentialScope,
    CredentialType,
    OpenShiftOAuthCredential,
    ServiceAccountTokenCredential,
    SshPrivateKeyCredential,
    TokenCredential,
    UsernamePasswordCredential,
    credential_adapter,
    parse_credential,
)

__all__ = [
    # Base
    "KubeConnectBaseModel",
    # Connection
    "AuthMode",
    "ConnectionConfig",
    # Credentials
    "BaseCredential",
    "BearerTokenCredential",
    "CertificateCredential",
    "Credential",
    "CredentialScope",
    "CredentialType",
    "OpenShiftOAuthCredential",
    "ServiceAccountTokenCredential",
    "SshPrivateKeyCredential",
    "TokenCredential",
    "UsernamePasswordCredential",
    "credential_adapter",
    "parse_credential",
]
