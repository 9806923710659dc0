"""
Secret Configuration - secret generation, strength check and settings.

Reads settings from environment variables:
    EXPRESS_SESSION_SECRET = <explicit active secret>
    SECRETKEY_PATH = <base directory for session.secret>
    SECRETKEY_STORAGE_TYPE = local | aws | gcp
    SECRETKEY_AWS_SESSION_SECRET = <remote secret name>

Security Note:
    Never log secret material. Only log origins, paths and secret names.
"""
import os
import secrets
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..conf import (
    ENV_SESSION_SECRET,
    ENV_REMOTE_SECRET_NAME,
    DEFAULT_SECRET_NAME,
    SECRET_FILENAME,
    PREVIOUS_SUFFIX,
    SECRET_MIN_SECURE_LENGTH,
    SECRET_RANDOM_BYTES,
    LOCAL_STORAGE,
    REMOTE_STORAGES,
    SESSION_PRINCIPAL_PATH,
    default_secret_dir,
    storage_type,
)

logger = logging.getLogger("navigator.secret")


def generate_secret() -> str:
    """Generate a random 32-byte secret and return it hex-encoded.

    This is the only place new secret material is produced; the operator
    CLI and the backends all go through it.

    Returns:
        64-character lowercase hex string.
    """
    return secrets.token_bytes(SECRET_RANDOM_BYTES).hex()


def validate_secret_strength(secret: str) -> bool:
    """Return True if a secret is long enough to be used.

    The check is on the length of the string itself, so a 64-character
    hex secret passes while a 31-character passphrase does not.

    Args:
        secret: secret in its external (string) form.
    """
    return len(secret) >= SECRET_MIN_SECURE_LENGTH


class SecretConfig(BaseModel):
    """Validated secret provisioning configuration."""

    explicit_secret: Optional[str] = Field(default=None, repr=False)
    remote_client: Optional[Any] = None
    storage_type: str = Field(default=LOCAL_STORAGE)
    secret_name: str = Field(default=DEFAULT_SECRET_NAME, min_length=1)
    secret_dir: Path = Field(default_factory=default_secret_dir)
    file_storage: bool = True
    principal_path: tuple[str, ...] = SESSION_PRINCIPAL_PATH

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("explicit_secret")
    @classmethod
    def empty_secret_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """An empty variable counts as not set."""
        return v or None

    @field_validator("storage_type")
    @classmethod
    def validate_storage(cls, v: str) -> str:
        """Validate storage type is supported."""
        v = v.strip().lower()
        if v != LOCAL_STORAGE and v not in REMOTE_STORAGES:
            raise ValueError(f"Unsupported secret storage type: {v}")
        return v

    @field_validator("principal_path")
    @classmethod
    def validate_principal_path(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("principal_path cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_remote_client(self) -> "SecretConfig":
        """A remote client needs a callable get/create pair."""
        client = self.remote_client
        if client is not None:
            for method in ("get", "create"):
                if not callable(getattr(client, method, None)):
                    raise ValueError(
                        f"remote_client must provide an async {method}()"
                    )
        return self

    @property
    def remote_configured(self) -> bool:
        return self.remote_client is not None

    @property
    def remote_requested(self) -> bool:
        """True when a remote manager was asked for, available or not."""
        return self.storage_type in REMOTE_STORAGES or self.remote_configured

    @property
    def secret_path(self) -> Path:
        return self.secret_dir.joinpath(SECRET_FILENAME)

    @property
    def previous_path(self) -> Path:
        return self.secret_dir.joinpath(SECRET_FILENAME + PREVIOUS_SUFFIX)

    @classmethod
    def from_env(cls, remote_client: Any = None, **kwargs) -> "SecretConfig":
        """Create SecretConfig by loading values from environment.

        Args:
            remote_client: optional remote secret-manager client, built once
                by the hosting process (see ``remote_client_from_env``).
            kwargs: explicit overrides of any field.

        Returns:
            Populated SecretConfig instance.
        """
        values = {
            "explicit_secret": os.environ.get(ENV_SESSION_SECRET),
            "remote_client": remote_client,
            "storage_type": storage_type(),
            "secret_name": os.environ.get(
                ENV_REMOTE_SECRET_NAME, DEFAULT_SECRET_NAME
            ),
            "secret_dir": default_secret_dir(),
        }
        values.update(kwargs)
        return cls(**values)
