"""kubeconnect.

Turns a stored credential reference into a ready-to-use connection
configuration for a Kubernetes/OpenShift API server:
- models: Pydantic data models (credentials, connection config)
- config: Configuration management
- observability: Structured logging
- clients: Outbound HTTP clients (OpenShift OAuth)
- services: Credential resolution, keystore handling, config assembly
"""

__version__ = "0.1.0"
