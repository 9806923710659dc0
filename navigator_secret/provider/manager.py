"""
SecretProvider - resolves the active session secret and the previous one.

Resolution order for the active secret (first match wins):
    1. explicit secret (EXPRESS_SESSION_SECRET), returned verbatim;
    2. remote secret manager, when a remote client is configured;
    3. ``<secret_dir>/session.secret`` on the file system, when no remote
       manager was requested.

A missing secret is generated and persisted. The resolved secret is cached
for the lifetime of the provider; request handling never goes back to the
backends.

Security Note:
    Never log secret material. Only log origins, paths and secret names.
"""
import asyncio
import logging
from typing import Optional

from .config import SecretConfig, generate_secret
from .backends import FileSecretBackend, RemoteSecretBackend
from .models import Secret, SecretOrigin, SecretLocation, MigrationContext
from ..exceptions import ConfigurationError, InsecureSecretError
from ..conf import ENV_SESSION_SECRET, SECRET_MIN_SECURE_LENGTH

logger = logging.getLogger("navigator.secret")


class SecretProvider:
    """Provides the session signing secret for a hosting process."""

    def __init__(self, config: Optional[SecretConfig] = None):
        self.config = config or SecretConfig.from_env()
        self._active: Optional[Secret] = None
        self._lock = asyncio.Lock()
        self._file = FileSecretBackend(self.config.secret_path)
        self._previous = FileSecretBackend(self.config.previous_path)
        self._remote: Optional[RemoteSecretBackend] = None
        if self.config.remote_client is not None:
            self._remote = RemoteSecretBackend(
                self.config.remote_client, self.config.secret_name
            )

    @property
    def location(self) -> SecretLocation:
        """Where the active secret is kept."""
        if self.config.explicit_secret:
            return SecretLocation(
                backend=SecretOrigin.ENVIRONMENT, identifier=ENV_SESSION_SECRET
            )
        if self.config.remote_requested:
            return SecretLocation(
                backend=SecretOrigin.REMOTE, identifier=self.config.secret_name
            )
        return SecretLocation(
            backend=SecretOrigin.FILESYSTEM, identifier=str(self.config.secret_path)
        )

    async def resolve_active_secret(self) -> Secret:
        """Return the active secret, generating and storing one if needed.

        Raises:
            ConfigurationError: no usable secret source.
            RemoteBackendError: the remote manager failed for a reason other
                than the secret not existing.
            InsecureSecretError: the stored secret is empty.
            OSError: the secret file exists but cannot be read or written.
        """
        if self._active is not None:
            return self._active
        async with self._lock:
            if self._active is None:
                self._active = await self._resolve()
                logger.info(
                    "Session secret resolved from %s", self._active.origin.value
                )
        return self._active

    async def _resolve(self) -> Secret:
        config = self.config
        if config.explicit_secret:
            return Secret(
                value=config.explicit_secret, origin=SecretOrigin.ENVIRONMENT
            )
        if self._remote is not None:
            value, created = await self._remote.fetch_or_create(generate_secret)
            self._check_not_empty(value, SecretOrigin.REMOTE)
            return Secret(
                value=value,
                origin=SecretOrigin.GENERATED if created else SecretOrigin.REMOTE,
            )
        if config.remote_requested:
            raise ConfigurationError(
                "The EXPRESS_SESSION_SECRET variable is not set, and the "
                f"{config.storage_type} secret manager is not available. "
                "Set EXPRESS_SESSION_SECRET or configure the secret manager."
            )
        if not config.file_storage:
            raise ConfigurationError(
                "The EXPRESS_SESSION_SECRET variable is not set, and no secret "
                "manager is configured. Either an explicit secret or a "
                "configured remote secret manager is required."
            )
        value, created = await self._file.read_or_create(generate_secret)
        self._check_not_empty(value, SecretOrigin.FILESYSTEM)
        return Secret(
            value=value,
            origin=SecretOrigin.GENERATED if created else SecretOrigin.FILESYSTEM,
        )

    def _check_not_empty(self, value: str, origin: SecretOrigin) -> None:
        if not value:
            raise InsecureSecretError(origin.value, 0, SECRET_MIN_SECURE_LENGTH)

    async def get_previous_secret(self) -> Optional[Secret]:
        """Return the previous secret, or None if there is none.

        Any read failure is treated as absence, including a file that is
        not valid UTF-8.
        """
        try:
            value = await self._previous.read()
        except (OSError, ValueError) as err:
            logger.debug(
                "No previous session secret at %s: %s",
                self._previous.path, err.__class__.__name__,
            )
            return None
        if not value:
            return None
        return Secret(value=value, origin=SecretOrigin.FILESYSTEM)

    async def store_previous_secret(self, secret: Secret) -> None:
        """Persist a secret as the previous one, replacing any existing."""
        await self._previous.write(secret.value)
        logger.info("Stored previous session secret at %s", self._previous.path)

    async def rotate(self) -> Secret:
        """Retire the file-backed secret and write a new active one.

        The current secret becomes the previous secret, so sessions signed
        with it can still be migrated. Operator action; never called while
        handling requests. A provider that already resolved its secret keeps
        serving it; the new secret takes effect when the process restarts.

        Raises:
            ConfigurationError: the active secret is not file-backed.
        """
        if self.config.explicit_secret or self.config.remote_requested:
            raise ConfigurationError(
                f"Secret rotation is only supported for file storage, "
                f"active secret comes from {self.location.backend.value}"
            )
        if not self.config.file_storage:
            raise ConfigurationError("File storage is disabled")
        async with self._lock:
            try:
                current = await self._file.read()
            except FileNotFoundError:
                current = None
            if current:
                await self.store_previous_secret(
                    Secret(value=current, origin=SecretOrigin.FILESYSTEM)
                )
            new = Secret(value=generate_secret(), origin=SecretOrigin.GENERATED)
            await self._file.replace(new.value)
        logger.info("Rotated session secret at %s", self._file.path)
        return new


async def load_migration_context(provider: SecretProvider) -> MigrationContext:
    """Resolve and validate the secrets for a hosting process.

    Raises:
        InsecureSecretError: the active secret fails strength validation.
    """
    active = await provider.resolve_active_secret()
    if not active.is_secure:
        raise InsecureSecretError(
            active.origin.value, len(active.value), SECRET_MIN_SECURE_LENGTH
        )
    previous = await provider.get_previous_secret()
    if active.same_as(previous):
        logger.warning(
            "Previous session secret equals the active one, migration disabled"
        )
        previous = None
    return MigrationContext(active=active, previous=previous)
