"""Keystore handling and certificate/key encodings."""

from .encoding import (
    PEM_KEY_FOOTER,
    PEM_KEY_HEADER,
    certificate_data_to_pem,
    encode_certificate,
    pem_encode_key,
    private_key_der,
)
from .keystore import DEFAULT_ALIAS, KeyStore, KeyStoreEntry, create_pkcs12

__all__ = [
    "DEFAULT_ALIAS",
    "KeyStore",
    "KeyStoreEntry",
    "PEM_KEY_FOOTER",
    "PEM_KEY_HEADER",
    "certificate_data_to_pem",
    "create_pkcs12",
    "encode_certificate",
    "pem_encode_key",
    "private_key_der",
]
