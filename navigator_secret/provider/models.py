"""
Secret models.

Secrets are immutable: a rotated or generated secret is always a new
``Secret`` instance. Secret material is excluded from ``repr()`` and
``str()`` so it never reaches a log line by accident.
"""
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import validate_secret_strength


class SecretOrigin(str, Enum):
    """Backend a secret was obtained from."""

    ENVIRONMENT = 'environment'
    REMOTE = 'remote'
    FILESYSTEM = 'filesystem'
    GENERATED = 'generated'


class Secret(BaseModel):
    """Session signing secret (hex string in its external form)."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False, min_length=1)
    origin: SecretOrigin

    @property
    def is_secure(self) -> bool:
        return validate_secret_strength(self.value)

    def same_as(self, other: Optional["Secret"]) -> bool:
        """Compare secret material, ignoring where it came from."""
        return other is not None and other.value == self.value

    def __str__(self) -> str:
        return f"<Secret origin={self.origin.value} length={len(self.value)}>"


class SecretLocation(BaseModel):
    """Resolved storage path or remote identifier of a secret."""

    model_config = ConfigDict(frozen=True)

    backend: SecretOrigin
    identifier: str

    @property
    def path(self) -> Path:
        if self.backend is not SecretOrigin.FILESYSTEM:
            raise ValueError(
                f"{self.backend.value} location has no filesystem path"
            )
        return Path(self.identifier)


class MigrationContext(BaseModel):
    """Active/previous secret pair used for a process lifetime.

    Rotating secrets requires building a new context; an existing one is
    never mutated.
    """

    model_config = ConfigDict(frozen=True)

    active: Secret
    previous: Optional[Secret] = None

    @model_validator(mode="after")
    def validate_distinct(self) -> "MigrationContext":
        """Previous secret must differ from the active one."""
        if self.active.same_as(self.previous):
            raise ValueError(
                "previous secret is identical to the active secret"
            )
        return self

    @property
    def has_previous(self) -> bool:
        return self.previous is not None

    def candidates(self) -> list[Secret]:
        """Secrets to try when verifying, active first."""
        if self.previous is None:
            return [self.active]
        return [self.active, self.previous]
