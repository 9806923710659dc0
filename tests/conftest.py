"""Shared fixtures: isolated environment, fake remote manager and session store."""
import uuid
import pytest

from navigator_secret.conf import (
    ENV_SESSION_SECRET,
    ENV_SECRETKEY_PATH,
    ENV_STORAGE_TYPE,
    ENV_REMOTE_SECRET_NAME,
)
from navigator_secret.exceptions import SecretNotFoundError, SecretAlreadyExistsError
from navigator_secret.provider import SecretConfig, Secret, SecretOrigin


class FakeRemoteClient:
    """In-memory remote secret manager."""

    def __init__(self, secrets=None):
        self.secrets = dict(secrets or {})
        self.get_calls = []
        self.create_calls = []

    async def get(self, name):
        self.get_calls.append(name)
        try:
            return self.secrets[name]
        except KeyError:
            raise SecretNotFoundError(name) from None

    async def create(self, name, value):
        self.create_calls.append(name)
        if name in self.secrets:
            raise SecretAlreadyExistsError(name)
        self.secrets[name] = value


class ExplodingRemoteClient:
    """Remote client that must never be contacted."""

    async def get(self, name):
        raise AssertionError("remote manager was contacted")

    async def create(self, name, value):
        raise AssertionError("remote manager was contacted")


class MemoryStore:
    """Async key-value session store."""

    def __init__(self):
        self.sessions = {}
        self.touched = []
        self.issued = 0

    def new_id(self):
        self.issued += 1
        return f"sid-{self.issued}-{uuid.uuid4().hex[:8]}"

    async def get(self, session_id):
        return self.sessions.get(session_id)

    async def set(self, session_id, session):
        self.sessions[session_id] = dict(session)

    async def destroy(self, session_id):
        self.sessions.pop(session_id, None)

    async def touch(self, session_id, session):
        self.touched.append(session_id)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Never read secret settings from the developer's environment."""
    for name in (
        ENV_SESSION_SECRET, ENV_SECRETKEY_PATH, ENV_STORAGE_TYPE, ENV_REMOTE_SECRET_NAME
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def secret_dir(tmp_path):
    return tmp_path.joinpath("secrets")


@pytest.fixture
def file_config(secret_dir):
    return SecretConfig(secret_dir=secret_dir)


@pytest.fixture
def remote_client():
    return FakeRemoteClient()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def active_secret():
    return Secret(value="a" * 64, origin=SecretOrigin.FILESYSTEM)


@pytest.fixture
def previous_secret():
    return Secret(value="b" * 64, origin=SecretOrigin.FILESYSTEM)
