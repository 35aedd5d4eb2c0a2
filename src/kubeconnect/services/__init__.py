"""Credential resolution and connection assembly services."""

from .client_factory import KubernetesClientFactory, build_kubeconfig, client_factory
from .connection_builder import ConnectionConfigBuilder, build_connection_config
from .credential_resolver import CredentialResolver
from .credential_store import (
    AccessScope,
    CredentialStore,
    DomainRequirement,
    InMemoryCredentialStore,
    KubernetesSecretCredentialStore,
    create_credential_store,
    credential_store,
    filter_credentials,
)

__all__ = [
    "AccessScope",
    "ConnectionConfigBuilder",
    "CredentialResolver",
    "CredentialStore",
    "DomainRequirement",
    "InMemoryCredentialStore",
    "KubernetesClientFactory",
    "KubernetesSecretCredentialStore",
    "build_connection_config",
    "build_kubeconfig",
    "client_factory",
    "create_credential_store",
    "credential_store",
    "filter_credentials",
]
