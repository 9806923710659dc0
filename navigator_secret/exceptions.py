"""Navigator Secret exceptions."""
from typing import Optional


class SecretError(Exception):
    """Base Error class."""


class ConfigurationError(SecretError):
    """No usable secret source could be found."""


class InsecureSecretError(SecretError):
    CUSTOM_ERROR_MESSAGE = (
        "Session secret from {} is too short ({} characters, minimum {}). "
        "Set EXPRESS_SESSION_SECRET to a longer value or remove it to let "
        "a secure secret be generated."
    )

    def __init__(self, origin: str, length: int, minimum: int):
        super().__init__(
            self.CUSTOM_ERROR_MESSAGE.format(origin, length, minimum)
        )
        self.origin = origin
        self.length = length


class RemoteBackendError(SecretError):
    CUSTOM_ERROR_MESSAGE = "Remote secret manager failed for {}: {}"

    def __init__(self, secret_name: str, error: Exception):
        super().__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_name, error))
        self._error = error
        self._secret_name = secret_name

    @property
    def error(self) -> Exception:
        return self._error

    @property
    def secret_name(self) -> str:
        return self._secret_name


class SecretNotFoundError(SecretError):
    """Raised by remote clients when the named secret does not exist."""

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"Secret {name} not found")
        self.name = name


class SecretAlreadyExistsError(SecretError):
    """Raised by remote clients when creating a secret that already exists."""

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"Secret {name} already exists")
        self.name = name


class MigrationSkipped(SecretError):
    """Session migration was not performed; never surfaced to the caller."""
