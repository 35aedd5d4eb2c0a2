"""Connection configuration assembly.

Turns an API server address, trust settings, timeouts and a credential id
into a ``ConnectionConfig``. The credential is resolved once, when the
builder is created; ``build()`` then reads exactly the fields of the matched
credential shape and performs any certificate/key re-encoding.
"""

from __future__ import annotations

from typing import Any

from pydantic import SecretStr

from kubeconnect.config import get_settings
from kubeconnect.exceptions import ConnectionConfigError
from kubeconnect.models import (
    CertificateCredential,
    ConnectionConfig,
    Credential,
    CredentialType,
)
from kubeconnect.observability import ConnectionContext, get_logger
from kubeconnect.security import encode_certificate, pem_encode_key

from .credential_resolver import CredentialResolver
from .credential_store import create_credential_store

logger = get_logger(__name__)


class ConnectionConfigBuilder:
    """Builds the connection configuration for one connection attempt."""

    def __init__(
        self,
        server_url: str,
        namespace: str | None = None,
        ca_cert_data: str | None = None,
        credentials_id: str | None = None,
        skip_tls_verify: bool = False,
        connect_timeout: int | None = None,
        read_timeout: int | None = None,
        resolver: CredentialResolver | None = None,
    ):
        if not server_url:
            raise ValueError("Server URL is required")

        defaults = get_settings().connection

        self.server_url = server_url
        self.namespace = namespace
        self.ca_cert_data = ca_cert_data
        self.credentials_id = credentials_id
        self.skip_tls_verify = skip_tls_verify
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None else defaults.connect_timeout_seconds
        )
        self.read_timeout = read_timeout if read_timeout is not None else defaults.read_timeout_seconds

        self.credentials: Credential | None = None
        if credentials_id:
            resolver = resolver or CredentialResolver(create_credential_store())
            self.credentials = resolver.resolve(credentials_id)

    def build(self) -> ConnectionConfig:
        """Assemble the connection configuration.

        Raises:
            NoSuchAlgorithmError: key or certificate algorithm unsupported
            UnrecoverableKeyError: keystore passphrase wrong or key missing
            KeyStoreAccessError: keystore malformed or without usable alias
            EncodingError: certificate cannot be DER encoded
        """
        with ConnectionContext(credential_id=self.credentials_id, server_url=self.server_url):
            fields: dict[str, Any] = {
                "master_url": self.server_url,
                "request_timeout_ms": self.read_timeout * 1000,
                "connection_timeout_ms": self.connect_timeout * 1000,
            }

            if self.namespace:
                fields["namespace"] = self.namespace

            if self.credentials is not None:
                try:
                    fields.update(self._auth_fields(self.credentials))
                except ConnectionConfigError as e:
                    logger.error(
                        "Failed to apply credentials",
                        kind=self.credentials.kind,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    raise

            if self.skip_tls_verify:
                fields["trust_certs"] = True

            if self.ca_cert_data is not None:
                fields["ca_cert_data"] = self.ca_cert_data

            connection = ConnectionConfig(**fields)

            logger.info(
                "Connection configuration built",
                namespace=connection.namespace,
                auth_mode=connection.auth_mode.value,
                trust_certs=connection.trust_certs,
                custom_ca=connection.ca_cert_data is not None,
            )
            return connection

    def _auth_fields(self, credential: Credential) -> dict[str, Any]:
        """Authentication fields for the credential's shape."""
        match credential.credential_type:
            case CredentialType.TOKEN:
                token = credential.get_token(self.server_url, self.ca_cert_data, self.skip_tls_verify)
                return {"oauth_token": SecretStr(token)}

            case CredentialType.USERNAME_PASSWORD:
                return {
                    "username": credential.username,
                    "password": SecretStr(credential.password.get_secret_value()),
                }

            case CredentialType.CERTIFICATE:
                return self._certificate_fields(credential)

            case _:
                # Stored credential with no cluster auth shape (e.g. an SSH key)
                logger.debug("Credential not applicable to cluster auth", kind=credential.kind)
                return {}

    def _certificate_fields(self, credential: CertificateCredential) -> dict[str, Any]:
        keystore = credential.load_keystore()
        alias = keystore.select_alias(credential.alias)
        certificate = keystore.get_certificate(alias)
        key = keystore.get_key(alias)

        return {
            "client_cert_data": encode_certificate(certificate),
            "client_key_data": SecretStr(pem_encode_key(key)),
            "client_key_passphrase": SecretStr(credential.password.get_secret_value()),
        }


def build_connection_config(
    server_url: str,
    namespace: str | None = None,
    ca_cert_data: str | None = None,
    credentials_id: str | None = None,
    skip_tls_verify: bool = False,
    connect_timeout: int | None = None,
    read_timeout: int | None = None,
    resolver: CredentialResolver | None = None,
) -> ConnectionConfig:
    """Resolve the credential and build the connection configuration."""
    return ConnectionConfigBuilder(
        server_url,
        namespace=namespace,
        ca_cert_data=ca_cert_data,
        credentials_id=credentials_id,
        skip_tls_verify=skip_tls_verify,
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        resolver=resolver,
    ).build()
