"""Credential lookup backends.

Stores are read-only here: they answer ``lookup(scope, domain_requirements)``
with every credential visible under the given access scope and matching the
domain requirements. Writing or rotating credentials is done elsewhere.

Backends:
- InMemoryCredentialStore: process-local list, used for development and tests
- KubernetesSecretCredentialStore: labelled Secrets in a namespace
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable, Sequence
from enum import Enum
from fnmatch import fnmatch
from typing import Any, Protocol

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from pydantic import BaseModel, ConfigDict, ValidationError

from kubeconnect.config import CredentialBackend, CredentialStoreSettings, get_settings
from kubeconnect.models import Credential, CredentialScope, parse_credential
from kubeconnect.observability import get_logger

logger = get_logger(__name__)

# Secret annotations
KIND_ANNOTATION = "kubeconnect.io/kind"
SCOPE_ANNOTATION = "kubeconnect.io/scope"
HOSTNAMES_ANNOTATION = "kubeconnect.io/hostnames"
DESCRIPTION_ANNOTATION = "kubeconnect.io/description"

# Built-in Secret types that map onto a credential kind without annotation
SECRET_TYPE_KINDS = {
    "kubernetes.io/basic-auth": "username_password",
    "kubernetes.io/service-account-token": "token",
}

# Secret data keys holding binary content
BINARY_KEYS = frozenset({"keystore"})


class AccessScope(str, Enum):
    """Privilege under which a lookup runs."""

    SYSTEM = "SYSTEM"  # sees every credential
    USER = "USER"  # sees GLOBAL credentials only


class DomainRequirement(BaseModel):
    """Restricts a lookup to credentials usable for a host."""

    model_config = ConfigDict(frozen=True)

    hostname: str | None = None

    def matches(self, credential: Credential) -> bool:
        if self.hostname is None or not credential.hostnames:
            return True
        hostname = self.hostname.lower()
        return any(fnmatch(hostname, pattern.lower()) for pattern in credential.hostnames)


class CredentialStore(Protocol):
    """Interface for credential lookup backends."""

    def lookup(
        self,
        scope: AccessScope,
        domain_requirements: Sequence[DomainRequirement],
    ) -> list[Credential]:
        """Return credentials visible under ``scope`` that satisfy every requirement."""
        ...


def filter_credentials(
    credentials: Iterable[Credential],
    scope: AccessScope,
    domain_requirements: Sequence[DomainRequirement],
) -> list[Credential]:
    """Apply scope visibility and domain requirements, keeping order."""
    visible = []
    for credential in credentials:
        if scope == AccessScope.USER and credential.scope != CredentialScope.GLOBAL:
            continue
        if all(requirement.matches(credential) for requirement in domain_requirements):
            visible.append(credential)
    return visible


class InMemoryCredentialStore:
    """Process-local credential store."""

    def __init__(self, credentials: Iterable[Credential] = ()):
        self._credentials: list[Credential] = list(credentials)

    def add(self, credential: Credential) -> None:
        self._credentials.append(credential)
        logger.info("Credential added", credential_id=credential.id, kind=credential.kind)

    def remove(self, credential_id: str) -> bool:
        """Remove every credential with ``credential_id``.

        Returns:
            True if anything was removed, False if not found
        """
        remaining = [c for c in self._credentials if c.id != credential_id]
        removed = len(remaining) != len(self._credentials)
        self._credentials = remaining
        if removed:
            logger.info("Credential removed", credential_id=credential_id)
        return removed

    def clear(self) -> None:
        self._credentials.clear()

    def lookup(
        self,
        scope: AccessScope,
        domain_requirements: Sequence[DomainRequirement],
    ) -> list[Credential]:
        return filter_credentials(self._credentials, scope, domain_requirements)


class KubernetesSecretCredentialStore:
    """Reads credentials from labelled Kubernetes Secrets.

    Each Secret becomes one credential whose id is the Secret name. The kind
    comes from the ``kubeconnect.io/kind`` annotation (or the Secret type for
    ``basic-auth`` and ``service-account-token`` Secrets); data keys map onto
    the credential's fields.
    """

    def __init__(
        self,
        namespace: str,
        label_selector: str,
        k8s_client: client.CoreV1Api | None = None,
    ):
        self.namespace = namespace
        self.label_selector = label_selector
        self._k8s_client = k8s_client

    def _get_k8s_client(self) -> client.CoreV1Api:
        """Get or create Kubernetes API client."""
        if self._k8s_client is None:
            try:
                # Try in-cluster config first
                config.load_incluster_config()
            except config.ConfigException:
                # Fall back to kubeconfig
                config.load_kube_config()

            self._k8s_client = client.CoreV1Api()

        return self._k8s_client

    def lookup(
        self,
        scope: AccessScope,
        domain_requirements: Sequence[DomainRequirement],
    ) -> list[Credential]:
        k8s = self._get_k8s_client()

        try:
            secrets = k8s.list_namespaced_secret(
                namespace=self.namespace,
                label_selector=self.label_selector,
            )
        except ApiException as e:
            if e.status == 404:
                logger.warning("Credential namespace not found", namespace=self.namespace)
                return []
            raise

        credentials = []
        for secret in secrets.items:
            credential = self._to_credential(secret)
            if credential is not None:
                credentials.append(credential)

        return filter_credentials(credentials, scope, domain_requirements)

    def _to_credential(self, secret: Any) -> Credential | None:
        """Map a Secret onto a credential model, or None if it cannot be used."""
        name = secret.metadata.name
        annotations = secret.metadata.annotations or {}

        kind = annotations.get(KIND_ANNOTATION) or SECRET_TYPE_KINDS.get(secret.type)
        if kind is None:
            logger.debug("Secret has no credential kind", secret=name)
            return None

        fields: dict[str, Any] = {
            "id": name,
            "kind": kind,
            "scope": annotations.get(SCOPE_ANNOTATION, CredentialScope.GLOBAL.value),
            "description": annotations.get(DESCRIPTION_ANNOTATION),
        }
        if hostnames := annotations.get(HOSTNAMES_ANNOTATION):
            fields["hostnames"] = tuple(h.strip() for h in hostnames.split(",") if h.strip())

        try:
            for key, value in (secret.data or {}).items():
                raw = base64.b64decode(value, validate=True)
                field_name = key.replace("-", "_")
                fields[field_name] = raw if field_name in BINARY_KEYS else raw.decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.warning(
                "Skipping undecodable credential secret",
                secret=name,
                kind=kind,
                field=key,
                error_type=type(e).__name__,
            )
            return None

        try:
            return parse_credential(fields)
        except ValidationError as e:
            # Only field locations are logged; error details may echo secret input
            logger.warning(
                "Skipping malformed credential secret",
                secret=name,
                kind=kind,
                invalid_fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()],
            )
            return None


# Singleton instance
credential_store = InMemoryCredentialStore()


def create_credential_store(
    settings: CredentialStoreSettings | None = None,
) -> CredentialStore:
    """Return the store selected by configuration."""
    settings = settings or get_settings().credentials

    if settings.backend == CredentialBackend.KUBERNETES:
        return KubernetesSecretCredentialStore(
            namespace=settings.namespace,
            label_selector=settings.label_selector,
        )
    return credential_store
