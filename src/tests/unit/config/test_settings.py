"""Tests for configuration management."""

from kubeconnect.config import (
    DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH,
    ConnectionSettings,
    CredentialBackend,
    Environment,
    LogFormat,
    Settings,
    get_settings,
)


class TestSettings:
    def test_connection_defaults(self):
        settings = ConnectionSettings()

        assert settings.connect_timeout_seconds == 5
        assert settings.read_timeout_seconds == 15
        assert settings.oauth_client_id == "openshift-challenging-client"
        assert settings.service_account_token_path == DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH

    def test_test_environment(self):
        """Test the environment configured by conftest is picked up."""
        settings = Settings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.log_format == LogFormat.TEXT
        assert settings.connection.connect_timeout_seconds == 5

    def test_nested_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("K8S_READ_TIMEOUT_SECONDS", "45")
        monkeypatch.setenv("CREDENTIALS_BACKEND", "kubernetes")
        monkeypatch.setenv("CREDENTIALS_NAMESPACE", "ci-credentials")

        settings = Settings()

        assert settings.connection.read_timeout_seconds == 45
        assert settings.credentials.backend == CredentialBackend.KUBERNETES
        assert settings.credentials.namespace == "ci-credentials"

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
