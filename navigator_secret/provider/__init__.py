"""Secret Provider - resolution, generation and validation of session secrets."""

from .config import SecretConfig, generate_secret, validate_secret_strength
from .models import Secret, SecretOrigin, SecretLocation, MigrationContext
from .backends import FileSecretBackend, RemoteSecretBackend, RemoteSecretClient
from .remote import (
    AWSSecretsManagerClient,
    GCPSecretManagerClient,
    remote_client_from_env,
)
from .manager import SecretProvider, load_migration_context

__all__ = [
    "SecretConfig",
    "generate_secret",
    "validate_secret_strength",
    "Secret",
    "SecretOrigin",
    "SecretLocation",
    "MigrationContext",
    "FileSecretBackend",
    "RemoteSecretBackend",
    "RemoteSecretClient",
    "AWSSecretsManagerClient",
    "GCPSecretManagerClient",
    "remote_client_from_env",
    "SecretProvider",
    "load_migration_context",
]
