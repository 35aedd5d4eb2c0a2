"""Tests for the OpenShift OAuth challenge client."""

import base64
import ssl

import httpx
import pytest

from kubeconnect.clients import OpenShiftOAuthClient, parse_token_redirect
from kubeconnect.clients.openshift_oauth import build_verify
from kubeconnect.exceptions import TokenAcquisitionError

SERVER_URL = "https://api.cluster.local:6443"
AUTHORIZE_URL = "https://oauth-openshift.apps.cluster.local/oauth/authorize"

OAUTH_METADATA = {
    "issuer": "https://oauth-openshift.apps.cluster.local",
    "authorization_endpoint": AUTHORIZE_URL,
    "token_endpoint": "https://oauth-openshift.apps.cluster.local/oauth/token",
}

TOKEN_REDIRECT = (
    "https://oauth-openshift.apps.cluster.local/oauth/token/implicit"
    "#access_token=sha256~issued-token&expires_in=86400&scope=user%3Afull&token_type=Bearer"
)


def make_transport(authorize_response: httpx.Response, requests: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.path == "/.well-known/oauth-authorization-server":
            return httpx.Response(200, json=OAUTH_METADATA)
        if request.url.path == "/oauth/authorize":
            return authorize_response
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestRequestToken:
    def test_challenge_flow(self):
        """Test discovery followed by the basic-auth challenge."""
        requests: list[httpx.Request] = []
        transport = make_transport(
            httpx.Response(302, headers={"Location": TOKEN_REDIRECT}),
            requests,
        )

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            token = client.request_token("developer", "developer-pw")

        assert token.access_token == "sha256~issued-token"
        assert token.expires_in == 86400

        discovery, authorize = requests
        assert str(discovery.url) == f"{SERVER_URL}/.well-known/oauth-authorization-server"
        assert authorize.url.params["client_id"] == "openshift-challenging-client"
        assert authorize.url.params["response_type"] == "token"
        assert authorize.headers["X-CSRF-Token"] == "1"
        expected = base64.b64encode(b"developer:developer-pw").decode()
        assert authorize.headers["Authorization"] == f"Basic {expected}"

    def test_rejected_credentials(self):
        transport = make_transport(httpx.Response(401))

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            with pytest.raises(TokenAcquisitionError) as exc_info:
                client.request_token("developer", "wrong")

        assert exc_info.value.status_code == 401

    def test_redirect_without_location(self):
        transport = make_transport(httpx.Response(302))

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            with pytest.raises(TokenAcquisitionError):
                client.request_token("developer", "developer-pw")

    def test_discovery_failure(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            with pytest.raises(TokenAcquisitionError) as exc_info:
                client.discover()

        assert exc_info.value.status_code == 404

    def test_discovery_not_json(self):
        """Test an HTML login page in place of metadata fails the handshake."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>login</html>"))

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            with pytest.raises(TokenAcquisitionError) as exc_info:
                client.request_token("developer", "developer-pw")

        assert exc_info.value.status_code == 200

    def test_discovery_missing_fields(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"issuer": "https://oauth.example.com"})
        )

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            with pytest.raises(TokenAcquisitionError):
                client.discover()

    def test_client_id_from_settings(self, monkeypatch):
        monkeypatch.setenv("K8S_OAUTH_CLIENT_ID", "custom-challenger")
        requests: list[httpx.Request] = []
        transport = make_transport(
            httpx.Response(302, headers={"Location": TOKEN_REDIRECT}),
            requests,
        )

        with OpenShiftOAuthClient(SERVER_URL, transport=transport) as client:
            client.request_token("developer", "developer-pw")

        assert requests[1].url.params["client_id"] == "custom-challenger"

    def test_network_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with OpenShiftOAuthClient(SERVER_URL, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.ConnectError):
                client.request_token("developer", "developer-pw")


class TestParseTokenRedirect:
    def test_fragment(self):
        token = parse_token_redirect(TOKEN_REDIRECT)

        assert token.access_token == "sha256~issued-token"
        assert token.token_type == "Bearer"

    def test_error_redirect(self):
        with pytest.raises(TokenAcquisitionError, match="access denied"):
            parse_token_redirect(
                "https://oauth.example.com/oauth/token/implicit"
                "#error=access_denied&error_description=access+denied"
            )

    def test_non_numeric_expiry(self):
        with pytest.raises(TokenAcquisitionError):
            parse_token_redirect(
                "https://oauth.example.com/oauth/token/implicit#access_token=abc&expires_in=soon"
            )

    def test_missing_token(self):
        with pytest.raises(TokenAcquisitionError):
            parse_token_redirect("https://oauth.example.com/oauth/token/implicit#expires_in=10")


class TestBuildVerify:
    def test_skip_verification(self, ca_cert_pem):
        assert build_verify(ca_cert_pem, True) is False

    def test_custom_ca(self, ca_cert_pem):
        assert isinstance(build_verify(ca_cert_pem, False), ssl.SSLContext)

    def test_system_trust(self):
        assert build_verify(None, False) is True
