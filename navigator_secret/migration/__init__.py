"""Session Migration - moves sessions from the previous secret to the active one."""

from .signing import CookieSigner, VerifiedCookie
from .store import MigrationStore
from .middleware import (
    migrate_session,
    session_migration_middleware,
    setup,
    MIGRATION_STORE_KEY,
    MIGRATION_CONTEXT_KEY,
)

__all__ = [
    "CookieSigner",
    "VerifiedCookie",
    "MigrationStore",
    "migrate_session",
    "session_migration_middleware",
    "setup",
    "MIGRATION_STORE_KEY",
    "MIGRATION_CONTEXT_KEY",
]
