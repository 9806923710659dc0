"""Navigator Secret.

Session secret provisioning and session migration across secret rotations.
"""
from .version import (
    __title__, __description__, __version__, __author__, __author_email__
)
from .exceptions import (
    SecretError,
    ConfigurationError,
    InsecureSecretError,
    RemoteBackendError,
    SecretNotFoundError,
    SecretAlreadyExistsError,
    MigrationSkipped,
)
from .data import SessionRecord
from .provider import (
    Secret,
    SecretOrigin,
    SecretLocation,
    MigrationContext,
    SecretConfig,
    SecretProvider,
    generate_secret,
    validate_secret_strength,
    load_migration_context,
    remote_client_from_env,
)
from .migration import MigrationStore, CookieSigner, migrate_session, setup

__all__ = (
    "SecretError",
    "ConfigurationError",
    "InsecureSecretError",
    "RemoteBackendError",
    "SecretNotFoundError",
    "SecretAlreadyExistsError",
    "MigrationSkipped",
    "SessionRecord",
    "Secret",
    "SecretOrigin",
    "SecretLocation",
    "MigrationContext",
    "SecretConfig",
    "SecretProvider",
    "generate_secret",
    "validate_secret_strength",
    "load_migration_context",
    "remote_client_from_env",
    "MigrationStore",
    "CookieSigner",
    "migrate_session",
    "setup",
)
