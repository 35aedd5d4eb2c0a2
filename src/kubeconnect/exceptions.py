"""Exception hierarchy for connection assembly.

A credential id that matches nothing is not an error; the resolver returns
None and the configuration is built without authentication.
"""


class ConnectionConfigError(Exception):
    """Base exception for failures while assembling a connection config."""

    pass


class NoSuchAlgorithmError(ConnectionConfigError):
    """The key or certificate algorithm is not supported by the crypto backend."""

    pass


class UnrecoverableKeyError(ConnectionConfigError):
    """The private key cannot be recovered (wrong passphrase or missing key)."""

    pass


class KeyStoreAccessError(ConnectionConfigError):
    """The keystore is malformed, unreadable, or has no usable alias."""

    def __init__(self, message: str, alias: str | None = None):
        self.alias = alias
        super().__init__(message)


class EncodingError(ConnectionConfigError):
    """Certificate DER encoding is unavailable or corrupt."""

    pass


class TokenAcquisitionError(ConnectionConfigError):
    """A token producer reached its identity provider but got no token back."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
