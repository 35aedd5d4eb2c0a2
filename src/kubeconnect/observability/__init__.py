"""Observability module for structured logging."""

from .logging import (
    REDACTED,
    ConnectionContext,
    credential_id_var,
    get_logger,
    log_external_call_end,
    log_external_call_start,
    redact_sensitive_fields,
    server_url_var,
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Context
    "ConnectionContext",
    "credential_id_var",
    "server_url_var",
    # Redaction
    "REDACTED",
    "redact_sensitive_fields",
    # Logging helpers
    "log_external_call_start",
    "log_external_call_end",
]
