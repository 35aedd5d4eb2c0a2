"""Configuration management module.

This module provides:
- Environment-based configuration with validation
- Connection defaults and credential store settings
- Cached settings access via get_settings()
"""

from .settings import (
    DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH,
    ConnectionSettings,
    CredentialBackend,
    CredentialStoreSettings,
    Environment,
    LogFormat,
    LogLevel,
    Settings,
    get_settings,
)

__all__ = [
    # Main settings
    "Settings",
    "get_settings",
    # Enums
    "CredentialBackend",
    "Environment",
    "LogLevel",
    "LogFormat",
    # Component settings
    "ConnectionSettings",
    "CredentialStoreSettings",
    # Constants
    "DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH",
]
