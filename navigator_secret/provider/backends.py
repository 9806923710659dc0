"""
Secret Backends - file system and remote secret-manager storage.

File writes use exclusive creation so two processes starting at the same
time never both generate a secret: the loser of the race reads back the
winner's value.
"""
import os
import asyncio
import logging
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from ..conf import SECRET_FILE_MODE
from ..exceptions import (
    SecretError,
    SecretNotFoundError,
    SecretAlreadyExistsError,
    RemoteBackendError,
)

logger = logging.getLogger("navigator.secret")

# attempts to read a secret file created concurrently by another process.
_CONFLICT_READ_ATTEMPTS = 5
_CONFLICT_READ_DELAY = 0.05


@runtime_checkable
class RemoteSecretClient(Protocol):
    """Contract consumed from a remote secret manager."""

    async def get(self, name: str) -> str:
        """Return the secret value or raise SecretNotFoundError."""
        ...

    async def create(self, name: str, value: str) -> None:
        """Create the secret or raise SecretAlreadyExistsError."""
        ...


class FileSecretBackend:
    """Plain-text secret file (hex string, no framing)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"<FileSecretBackend path={self.path}>"

    async def read(self) -> str:
        """Read the secret file.

        Raises:
            FileNotFoundError: the file does not exist.
            OSError: any other read failure.
        """
        content = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        return content.strip()

    def _create_exclusive(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(
            self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, SECRET_FILE_MODE
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fp.write(value)
        except OSError:
            # never leave an empty secret file behind.
            self.path.unlink(missing_ok=True)
            raise

    def _write(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(
            self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECRET_FILE_MODE
        )
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            fp.write(value)

    def _replace(self, value: str) -> None:
        tmp = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(
            tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECRET_FILE_MODE
        )
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            fp.write(value)
        os.replace(tmp, self.path)

    async def write(self, value: str) -> None:
        """Write the secret, overwriting any existing value."""
        await asyncio.to_thread(self._write, value)

    async def replace(self, value: str) -> None:
        """Atomically swap in a new secret value."""
        await asyncio.to_thread(self._replace, value)

    async def _read_after_conflict(self) -> str:
        # the winning process may not have flushed its write yet.
        for _ in range(_CONFLICT_READ_ATTEMPTS):
            value = await self.read()
            if value:
                return value
            await asyncio.sleep(_CONFLICT_READ_DELAY)
        raise SecretError(
            f"Secret file {self.path} was created concurrently but is still empty"
        )

    async def read_or_create(self, generate: Callable[[], str]) -> tuple[str, bool]:
        """Return the stored secret, creating it when the file is missing.

        Returns:
            Tuple of (secret value, True if it was generated by this call).
        """
        try:
            return await self.read(), False
        except FileNotFoundError:
            pass
        value = generate()
        try:
            await asyncio.to_thread(self._create_exclusive, value)
        except FileExistsError:
            logger.info(
                "Secret file %s created by another process, reading it back",
                self.path,
            )
            return await self._read_after_conflict(), False
        logger.info("Generated new session secret at %s", self.path)
        return value, True


class RemoteSecretBackend:
    """Named secret kept in a remote secret manager."""

    def __init__(self, client: RemoteSecretClient, name: str):
        self.client = client
        self.name = name

    def __repr__(self) -> str:
        return f"<RemoteSecretBackend name={self.name}>"

    async def _get(self) -> str:
        try:
            return await self.client.get(self.name)
        except SecretNotFoundError:
            raise
        except Exception as err:
            raise RemoteBackendError(self.name, err) from err

    async def fetch_or_create(self, generate: Callable[[], str]) -> tuple[str, bool]:
        """Return the remote secret, creating it when it does not exist.

        Raises:
            RemoteBackendError: any remote failure other than not-found.
        """
        try:
            return await self._get(), False
        except SecretNotFoundError:
            logger.info(
                "Remote secret %s not found, creating a new one", self.name
            )
        value = generate()
        try:
            await self.client.create(self.name, value)
        except SecretAlreadyExistsError:
            logger.info(
                "Remote secret %s created concurrently, reading it back",
                self.name,
            )
            try:
                return await self._get(), False
            except SecretNotFoundError as err:
                raise RemoteBackendError(self.name, err) from err
        except Exception as err:
            raise RemoteBackendError(self.name, err) from err
        return value, True
