"""PKCS#12 keystore access.

A keystore holds aliased entries, each pairing an X.509 certificate with its
private key. Loading unlocks the container with the stored passphrase; the
decrypted key only lives as long as the ``KeyStore`` object.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import pkcs12

from kubeconnect.exceptions import (
    KeyStoreAccessError,
    NoSuchAlgorithmError,
    UnrecoverableKeyError,
)
from kubeconnect.observability import get_logger

logger = get_logger(__name__)

# Alias given to entries without a friendly name
DEFAULT_ALIAS = "1"

# DER prefix of the PFX version field (INTEGER 3)
_PFX_VERSION = b"\x02\x01\x03"


@dataclass(frozen=True)
class KeyStoreEntry:
    """A single aliased keystore entry."""

    alias: str
    certificate: x509.Certificate | None
    private_key: PrivateKeyTypes | None = field(default=None, repr=False)
    chain: tuple[x509.Certificate, ...] = ()


def _looks_like_pfx(data: bytes) -> bool:
    """Check the outer DER framing of a PFX structure.

    Used to tell a corrupt container from one that parses but fails its
    integrity check (wrong passphrase).
    """
    if len(data) < 5 or data[0] != 0x30:
        return False
    offset = 2
    if data[1] & 0x80:
        offset += data[1] & 0x7F
    return data[offset : offset + 3] == _PFX_VERSION


class KeyStore:
    """Read-only view over the entries of a keystore."""

    def __init__(self, entries: list[KeyStoreEntry] | None = None):
        self._entries: dict[str, KeyStoreEntry] = {}
        for entry in entries or []:
            if entry.alias in self._entries:
                raise KeyStoreAccessError(f"Duplicate keystore alias '{entry.alias}'", alias=entry.alias)
            self._entries[entry.alias] = entry

    @classmethod
    def load_pkcs12(cls, data: bytes, passphrase: str | None) -> KeyStore:
        """Unlock a PKCS#12 container.

        Raises:
            KeyStoreAccessError: data is empty or not PKCS#12
            UnrecoverableKeyError: passphrase does not unlock the container
            NoSuchAlgorithmError: container uses an unsupported cipher or key type
        """
        if not data:
            raise KeyStoreAccessError("Keystore is empty")

        password = passphrase.encode("utf-8") if passphrase else None
        try:
            loaded = pkcs12.load_pkcs12(data, password)
        except UnsupportedAlgorithm as e:
            raise NoSuchAlgorithmError(f"Unsupported keystore algorithm: {e}") from e
        except ValueError as e:
            if _looks_like_pfx(data):
                raise UnrecoverableKeyError(
                    "Keystore could not be unlocked with the stored passphrase"
                ) from e
            raise KeyStoreAccessError("Keystore is not valid PKCS#12 data") from e

        if loaded.key is None and loaded.cert is None:
            return cls([])

        alias = DEFAULT_ALIAS
        certificate = None
        if loaded.cert is not None:
            certificate = loaded.cert.certificate
            if loaded.cert.friendly_name:
                alias = loaded.cert.friendly_name.decode("utf-8")

        chain = tuple(c.certificate for c in loaded.additional_certs)
        if certificate is not None:
            chain = (certificate,) + chain

        return cls(
            [
                KeyStoreEntry(
                    alias=alias,
                    certificate=certificate,
                    private_key=loaded.key,
                    chain=chain,
                )
            ]
        )

    def aliases(self) -> list[str]:
        """Aliases in enumeration order."""
        return list(self._entries)

    def select_alias(self, preferred: str | None = None) -> str:
        """Pick the entry to authenticate with.

        A named alias must exist. Without one, the first enumerated alias
        is used.
        """
        aliases = self.aliases()
        if not aliases:
            raise KeyStoreAccessError("Keystore contains no entries")

        if preferred is not None:
            if preferred not in self._entries:
                raise KeyStoreAccessError(
                    f"Alias '{preferred}' not found in keystore", alias=preferred
                )
            return preferred

        if len(aliases) > 1:
            logger.warning(
                "Keystore has several entries, using the first one",
                alias=aliases[0],
                alias_count=len(aliases),
            )
        return aliases[0]

    def _entry(self, alias: str) -> KeyStoreEntry:
        try:
            return self._entries[alias]
        except KeyError:
            raise KeyStoreAccessError(f"Alias '{alias}' not found in keystore", alias=alias) from None

    def get_certificate(self, alias: str) -> x509.Certificate:
        certificate = self._entry(alias).certificate
        if certificate is None:
            raise KeyStoreAccessError(f"No certificate stored under alias '{alias}'", alias=alias)
        return certificate

    def get_certificate_chain(self, alias: str) -> tuple[x509.Certificate, ...]:
        return self._entry(alias).chain

    def get_key(self, alias: str) -> PrivateKeyTypes:
        key = self._entry(alias).private_key
        if key is None:
            raise UnrecoverableKeyError(f"No private key stored under alias '{alias}'")
        return key


def create_pkcs12(
    certificate_pem: str | bytes,
    private_key_pem: str | bytes,
    passphrase: str,
    alias: str | None = None,
    key_password: str | None = None,
) -> bytes:
    """Bundle a PEM certificate (chain) and private key into PKCS#12 bytes.

    The first certificate is the entry's own; the rest become its chain.
    """
    if isinstance(certificate_pem, str):
        certificate_pem = certificate_pem.encode("utf-8")
    if isinstance(private_key_pem, str):
        private_key_pem = private_key_pem.encode("utf-8")

    try:
        certificates = x509.load_pem_x509_certificates(certificate_pem)
        key = serialization.load_pem_private_key(
            private_key_pem,
            password=key_password.encode("utf-8") if key_password else None,
        )
    except UnsupportedAlgorithm as e:
        raise NoSuchAlgorithmError(f"Unsupported key algorithm: {e}") from e
    except (TypeError, ValueError) as e:
        raise KeyStoreAccessError(f"Invalid PEM material: {e}") from e

    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase.encode("utf-8"))
    else:
        encryption = serialization.NoEncryption()

    return pkcs12.serialize_key_and_certificates(
        name=alias.encode("utf-8") if alias else None,
        key=key,
        cert=certificates[0],
        cas=certificates[1:] or None,
        encryption_algorithm=encryption,
    )
