"""Credential resolution by identifier."""

from __future__ import annotations

from kubeconnect.models import Credential
from kubeconnect.observability import get_logger

from .credential_store import AccessScope, CredentialStore

logger = get_logger(__name__)


class CredentialResolver:
    """Finds a stored credential by id.

    The lookup runs under an explicit access scope. SYSTEM (the default)
    sees credentials that are hidden from user-level lookups, so callers
    acting on behalf of a user should pass ``AccessScope.USER``.
    """

    def __init__(
        self,
        store: CredentialStore,
        scope: AccessScope = AccessScope.SYSTEM,
    ):
        self.store = store
        self.scope = scope

    def resolve(self, credential_id: str | None) -> Credential | None:
        """Return the first credential with ``credential_id``, or None.

        A missing credential is not an error: the connection is then built
        without authentication.
        """
        if not credential_id:
            return None

        credentials = self.store.lookup(self.scope, [])
        credential = next((c for c in credentials if c.id == credential_id), None)

        if credential is None:
            logger.warning(
                "Credential not found",
                credential_id=credential_id,
                scope=self.scope.value,
            )
        else:
            logger.debug(
                "Credential resolved",
                credential_id=credential_id,
                kind=credential.kind,
            )
        return credential
