"""Outbound HTTP clients."""

from .openshift_oauth import (
    OAuthServerMetadata,
    OAuthToken,
    OpenShiftOAuthClient,
    parse_token_redirect,
)

__all__ = [
    "OAuthServerMetadata",
    "OAuthToken",
    "OpenShiftOAuthClient",
    "parse_token_redirect",
]
