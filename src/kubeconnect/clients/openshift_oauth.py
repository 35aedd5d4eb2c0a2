"""OpenShift OAuth client.

Obtains a bearer token for a username/password pair through the
OpenShift OAuth server's challenge flow:

1. Discover the authorization endpoint from the API server
   (``/.well-known/oauth-authorization-server``).
2. Request an implicit-grant token with HTTP basic auth. The server answers
   with a redirect whose ``Location`` fragment carries ``access_token``.

Calls are blocking and carry no timeout of their own.
"""

from __future__ import annotations

import base64
import ssl
import time
from urllib.parse import parse_qs, urlsplit

import httpx
from pydantic import BaseModel, ValidationError

from kubeconnect.config import get_settings
from kubeconnect.exceptions import TokenAcquisitionError
from kubeconnect.observability import (
    get_logger,
    log_external_call_end,
    log_external_call_start,
)

logger = get_logger(__name__)

WELL_KNOWN_PATH = "/.well-known/oauth-authorization-server"


class OAuthServerMetadata(BaseModel):
    """Subset of the OAuth authorization server metadata."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str | None = None


class OAuthToken(BaseModel):
    """Access token issued by the OAuth server."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None


def build_verify(ca_cert_data: str | None, skip_tls_verify: bool) -> ssl.SSLContext | bool:
    """Translate trust settings into an httpx ``verify`` argument."""
    if skip_tls_verify:
        return False
    if ca_cert_data:
        return ssl.create_default_context(cadata=ca_cert_data)
    return True


class OpenShiftOAuthClient:
    """Client for the OpenShift OAuth challenge flow."""

    def __init__(
        self,
        server_url: str,
        ca_cert_data: str | None = None,
        skip_tls_verify: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.client = httpx.Client(
            verify=build_verify(ca_cert_data, skip_tls_verify),
            timeout=None,
            follow_redirects=False,
            transport=transport,
        )

    def __enter__(self) -> OpenShiftOAuthClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def discover(self) -> OAuthServerMetadata:
        """Fetch the OAuth server metadata advertised by the API server."""
        start = time.perf_counter()
        log_external_call_start(logger, "openshift-oauth", "discover")

        response = self.client.get(f"{self.server_url}{WELL_KNOWN_PATH}")

        duration_ms = (time.perf_counter() - start) * 1000
        if response.status_code != 200:
            log_external_call_end(
                logger,
                "openshift-oauth",
                "discover",
                success=False,
                duration_ms=duration_ms,
                error=f"HTTP {response.status_code}",
            )
            raise TokenAcquisitionError(
                f"OAuth discovery failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            metadata = OAuthServerMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            log_external_call_end(
                logger,
                "openshift-oauth",
                "discover",
                success=False,
                duration_ms=duration_ms,
                error="malformed metadata",
            )
            raise TokenAcquisitionError(
                "OAuth discovery returned malformed server metadata",
                status_code=response.status_code,
            ) from e

        log_external_call_end(
            logger, "openshift-oauth", "discover", success=True, duration_ms=duration_ms
        )
        return metadata

    def request_token(
        self,
        username: str,
        password: str,
        client_id: str | None = None,
    ) -> OAuthToken:
        """Run discovery and the challenge request, returning the issued token."""
        metadata = self.discover()
        client_id = client_id or get_settings().connection.oauth_client_id

        credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
        headers = {
            "Authorization": f"Basic {credentials}",
            "X-CSRF-Token": "1",
        }

        start = time.perf_counter()
        log_external_call_start(logger, "openshift-oauth", "authorize")

        response = self.client.get(
            metadata.authorization_endpoint,
            params={"client_id": client_id, "response_type": "token"},
            headers=headers,
        )

        duration_ms = (time.perf_counter() - start) * 1000
        location = response.headers.get("Location")
        if response.status_code != 302 or not location:
            log_external_call_end(
                logger,
                "openshift-oauth",
                "authorize",
                success=False,
                duration_ms=duration_ms,
                error=f"HTTP {response.status_code}",
            )
            if response.status_code == 401:
                raise TokenAcquisitionError(
                    "OAuth server rejected the username/password",
                    status_code=401,
                )
            raise TokenAcquisitionError(
                f"Unexpected OAuth authorize response: {response.status_code}",
                status_code=response.status_code,
            )

        log_external_call_end(
            logger, "openshift-oauth", "authorize", success=True, duration_ms=duration_ms
        )
        return parse_token_redirect(location)


def parse_token_redirect(location: str) -> OAuthToken:
    """Extract the token from an implicit-grant redirect URL."""
    parts = urlsplit(location)
    params = parse_qs(parts.fragment) or parse_qs(parts.query)

    if "error" in params:
        description = params.get("error_description", params["error"])[0]
        raise TokenAcquisitionError(f"OAuth server returned an error: {description}")

    if "access_token" not in params:
        raise TokenAcquisitionError("OAuth redirect did not contain an access token")

    try:
        return OAuthToken(
            access_token=params["access_token"][0],
            token_type=params.get("token_type", ["Bearer"])[0],
            expires_in=params.get("expires_in", [None])[0],
        )
    except ValidationError as e:
        raise TokenAcquisitionError("OAuth redirect carried a malformed token") from e
