"""
Navigator Secret configuration.

Well-known names and environment-driven defaults shared by the secret
provider and the session migration layer.
"""
import os
from pathlib import Path

## Environment variables
ENV_SESSION_SECRET = 'EXPRESS_SESSION_SECRET'
ENV_SECRETKEY_PATH = 'SECRETKEY_PATH'
ENV_STORAGE_TYPE = 'SECRETKEY_STORAGE_TYPE'
ENV_REMOTE_SECRET_NAME = 'SECRETKEY_AWS_SESSION_SECRET'
ENV_AWS_REGION = 'SECRETKEY_AWS_REGION'
ENV_GCP_PROJECT = 'SECRETKEY_GCP_PROJECT'

## Secret storage
DEFAULT_SECRET_NAME = 'FlowiseSessionSecret'
DEFAULT_SECRET_DIR = '.flowise'
SECRET_FILENAME = 'session.secret'
PREVIOUS_SUFFIX = '.previous'
SECRET_FILE_MODE = 0o600

# minimum length of the string form, not of the decoded bytes.
SECRET_MIN_SECURE_LENGTH = 32
SECRET_RANDOM_BYTES = 32

LOCAL_STORAGE = 'local'
REMOTE_STORAGES = ('aws', 'gcp')

## Session
SESSION_ID = 'session_id'
SESSION_OBJECT = 'session'
SESSION_STORAGE = 'session_storage'
SESSION_PRINCIPAL_PATH = ('passport', 'user')

# set on regenerated sessions so they are migrated only once.
SESSION_MIGRATED_KEY = '__secret_migrated__'


def default_secret_dir() -> Path:
    """Base directory for secret files.

    ``SECRETKEY_PATH`` is used as-is when set; otherwise the secret lives
    under ``~/.flowise``.
    """
    base = os.environ.get(ENV_SECRETKEY_PATH)
    if base:
        return Path(base)
    return Path.home().joinpath(DEFAULT_SECRET_DIR)


def storage_type() -> str:
    return os.environ.get(ENV_STORAGE_TYPE, LOCAL_STORAGE).strip().lower()
