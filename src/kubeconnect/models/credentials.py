"""Credential models.

Credentials form a closed union discriminated by ``kind``. Each kind also
declares the shape it authenticates with (``credential_type``), which is what
connection assembly dispatches on:

- TOKEN: produces a bearer token (static, mounted service account, OpenShift OAuth)
- USERNAME_PASSWORD: HTTP basic auth
- CERTIFICATE: client certificate + key from a PKCS#12 keystore
- OTHER: stored but not usable against a cluster API

Secret values are ``SecretStr`` handles and are only read through
``get_secret_value()``.
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from pathlib import Path
from typing import Annotated, ClassVar, Literal, Union

from pydantic import Field, SecretStr, TypeAdapter, field_validator

from kubeconnect.clients.openshift_oauth import OpenShiftOAuthClient
from kubeconnect.config import get_settings
from kubeconnect.security import KeyStore, create_pkcs12

from .base import KubeConnectBaseModel


class CredentialType(str, Enum):
    """Authentication shape of a credential."""

    TOKEN = "TOKEN"
    USERNAME_PASSWORD = "USERNAME_PASSWORD"
    CERTIFICATE = "CERTIFICATE"
    OTHER = "OTHER"


class CredentialScope(str, Enum):
    """Visibility of a stored credential."""

    GLOBAL = "GLOBAL"  # usable by any caller
    SYSTEM = "SYSTEM"  # only visible to system-level lookups


class BaseCredential(KubeConnectBaseModel):
    """Fields shared by every stored credential."""

    credential_type: ClassVar[CredentialType] = CredentialType.OTHER

    id: str = Field(min_length=1, description="Credential identifier")
    description: str | None = Field(default=None, description="Human readable description")
    scope: CredentialScope = Field(default=CredentialScope.GLOBAL)
    hostnames: tuple[str, ...] = Field(
        default=(),
        description="Hostname patterns this credential is restricted to (empty = any)",
    )


class TokenCredential(BaseCredential):
    """Credential that produces a bearer token on demand."""

    credential_type: ClassVar[CredentialType] = CredentialType.TOKEN

    @abstractmethod
    def get_token(
        self,
        endpoint: str,
        ca_cert_data: str | None,
        skip_tls_verify: bool,
    ) -> str:
        """Return a bearer token valid for ``endpoint``.

        May perform blocking network I/O.
        """


class BearerTokenCredential(TokenCredential):
    """Static bearer token."""

    kind: Literal["token"] = "token"
    token: SecretStr

    def get_token(self, endpoint: str, ca_cert_data: str | None, skip_tls_verify: bool) -> str:
        return self.token.get_secret_value()


class ServiceAccountTokenCredential(TokenCredential):
    """Token of the service account the process runs as."""

    kind: Literal["service_account"] = "service_account"
    token_path: str | None = Field(
        default=None,
        description="Token file; the configured service account path when unset",
    )

    def get_token(self, endpoint: str, ca_cert_data: str | None, skip_tls_verify: bool) -> str:
        token_path = self.token_path or get_settings().connection.service_account_token_path
        return Path(token_path).read_text(encoding="utf-8").strip()


class OpenShiftOAuthCredential(TokenCredential):
    """Username/password exchanged for a token at the cluster's OAuth server."""

    kind: Literal["openshift_oauth"] = "openshift_oauth"
    username: str = Field(min_length=1)
    password: SecretStr
    client_id: str | None = Field(
        default=None,
        description="OAuth client; the configured challenging client when unset",
    )

    def get_token(self, endpoint: str, ca_cert_data: str | None, skip_tls_verify: bool) -> str:
        with OpenShiftOAuthClient(endpoint, ca_cert_data, skip_tls_verify) as client:
            token = client.request_token(
                self.username,
                self.password.get_secret_value(),
                client_id=self.client_id,
            )
        return token.access_token


class UsernamePasswordCredential(BaseCredential):
    """Username and password for basic auth."""

    credential_type: ClassVar[CredentialType] = CredentialType.USERNAME_PASSWORD

    kind: Literal["username_password"] = "username_password"
    username: str
    password: SecretStr


class CertificateCredential(BaseCredential):
    """Client certificate and key held in a passphrase-protected PKCS#12 keystore."""

    credential_type: ClassVar[CredentialType] = CredentialType.CERTIFICATE

    kind: Literal["certificate"] = "certificate"
    keystore: bytes = Field(repr=False, description="PKCS#12 keystore bytes")
    password: SecretStr = Field(default=SecretStr(""), description="Keystore passphrase")
    alias: str | None = Field(
        default=None,
        description="Entry to use; the first enumerated alias when unset",
    )

    @field_validator("keystore")
    @classmethod
    def validate_keystore(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("Keystore must not be empty")
        return v

    def load_keystore(self) -> KeyStore:
        """Unlock the keystore with the stored passphrase."""
        return KeyStore.load_pkcs12(self.keystore, self.password.get_secret_value())

    @classmethod
    def from_pem(
        cls,
        id: str,
        certificate_pem: str | bytes,
        private_key_pem: str | bytes,
        password: str,
        alias: str | None = None,
        key_password: str | None = None,
        **kwargs,
    ) -> CertificateCredential:
        """Build a credential from PEM material, bundling it as PKCS#12."""
        keystore = create_pkcs12(
            certificate_pem,
            private_key_pem,
            password,
            alias=alias,
            key_password=key_password,
        )
        return cls(
            id=id,
            keystore=keystore,
            password=SecretStr(password),
            alias=alias,
            **kwargs,
        )


class SshPrivateKeyCredential(BaseCredential):
    """SSH key pair. Stored alongside cluster credentials, never used for the API."""

    kind: Literal["ssh_private_key"] = "ssh_private_key"
    username: str
    private_key: SecretStr
    passphrase: SecretStr | None = None


Credential = Annotated[
    Union[
        BearerTokenCredential,
        ServiceAccountTokenCredential,
        OpenShiftOAuthCredential,
        UsernamePasswordCredential,
        CertificateCredential,
        SshPrivateKeyCredential,
    ],
    Field(discriminator="kind"),
]

credential_adapter: TypeAdapter[Credential] = TypeAdapter(Credential)


def parse_credential(data: dict) -> Credential:
    """Validate a raw mapping into the matching credential model."""
    return credential_adapter.validate_python(data)
