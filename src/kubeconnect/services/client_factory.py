"""Kubernetes client construction from a ConnectionConfig.

The configuration is rendered as an in-memory kubeconfig and loaded with the
official client's kubeconfig loader, which writes certificate/key data to
temporary files as needed.
"""

from __future__ import annotations

import base64
from typing import Any

from kubernetes import client, config

from kubeconnect.models import AuthMode, ConnectionConfig
from kubeconnect.observability import get_logger
from kubeconnect.security import certificate_data_to_pem

logger = get_logger(__name__)

KUBECONFIG_ENTRY_NAME = "kubeconnect"


def build_kubeconfig(connection: ConnectionConfig) -> dict[str, Any]:
    """Render a single-context kubeconfig for ``connection``."""
    cluster: dict[str, Any] = {"server": connection.master_url}
    if connection.ca_cert_data:
        cluster["certificate-authority-data"] = base64.b64encode(
            connection.ca_cert_data.encode("utf-8")
        ).decode("ascii")
    if connection.trust_certs:
        cluster["insecure-skip-tls-verify"] = True

    user: dict[str, Any] = {}
    match connection.auth_mode:
        case AuthMode.TOKEN:
            user["token"] = connection.oauth_token.get_secret_value()
        case AuthMode.BASIC:
            user["username"] = connection.username
            user["password"] = connection.password.get_secret_value() if connection.password else ""
        case AuthMode.CLIENT_CERTIFICATE:
            # The Python client expects PEM, the config carries DER
            user["client-certificate-data"] = base64.b64encode(
                certificate_data_to_pem(connection.client_cert_data)
            ).decode("ascii")
            # Already Base64 of a PEM document
            user["client-key-data"] = connection.client_key_data.get_secret_value()

    context: dict[str, Any] = {
        "cluster": KUBECONFIG_ENTRY_NAME,
        "user": KUBECONFIG_ENTRY_NAME,
    }
    if connection.namespace:
        context["namespace"] = connection.namespace

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": KUBECONFIG_ENTRY_NAME, "cluster": cluster}],
        "users": [{"name": KUBECONFIG_ENTRY_NAME, "user": user}],
        "contexts": [{"name": KUBECONFIG_ENTRY_NAME, "context": context}],
        "current-context": KUBECONFIG_ENTRY_NAME,
    }


class KubernetesClientFactory:
    """Creates official Kubernetes API clients.

    Timeouts are not part of ``client.Configuration``; pass
    ``connection.request_timeout`` as ``_request_timeout`` on API calls.
    """

    def create_configuration(self, connection: ConnectionConfig) -> client.Configuration:
        configuration = client.Configuration()
        config.load_kube_config_from_dict(
            build_kubeconfig(connection),
            client_configuration=configuration,
            persist_config=False,
        )
        return configuration

    def create_client(self, connection: ConnectionConfig) -> client.ApiClient:
        """Create an ApiClient for the connection."""
        api_client = client.ApiClient(configuration=self.create_configuration(connection))
        logger.info(
            "Kubernetes client created",
            server_url=connection.master_url,
            auth_mode=connection.auth_mode.value,
        )
        return api_client


# Singleton instance
client_factory = KubernetesClientFactory()
