"""
MigrationStore - session store wrapper aware of secret rotation.

Wraps any asynchronous session store exposing ``get``, ``set``, ``destroy``
and ``touch`` by session id. Lookups that miss while a previous secret is
configured go through the migration path, which never fabricates session
data: whatever cannot be migrated resolves to "not found" and the caller
starts a fresh session.

Real migration happens at the cookie layer: ``load()`` verifies the cookie
against the active and then the previous secret, and hands back a cookie
re-signed with the active secret when the previous one matched.
"""
import uuid
import inspect
import logging
from typing import Any, Optional
from collections.abc import Iterable, Mapping

from ..conf import SESSION_PRINCIPAL_PATH, SESSION_MIGRATED_KEY
from ..data import SessionRecord
from ..exceptions import MigrationSkipped
from ..provider.models import MigrationContext
from .signing import CookieSigner, VerifiedCookie

logger = logging.getLogger("navigator.secret")


class MigrationStore:
    """Session store wrapper used during secret rotation."""

    def __init__(
        self,
        store: Any,
        context: MigrationContext,
        signer: Optional[CookieSigner] = None,
        carry_over: Optional[Iterable[str]] = None,
        principal_path: tuple[str, ...] = SESSION_PRINCIPAL_PATH,
    ):
        self.store = store
        self.context = context
        self.signer = signer or CookieSigner(context)
        self.carry_over = tuple(carry_over) if carry_over is not None else None
        self.principal_path = principal_path

    def __repr__(self) -> str:
        return (
            f"<MigrationStore store={self.store!r} "
            f"previous={self.context.has_previous}>"
        )

    async def get(self, session_id: str) -> Any:
        """Return the stored session, or None.

        Errors raised by the wrapped store propagate unchanged.
        """
        session = await self.store.get(session_id)
        if session is not None:
            return session
        if not self.context.has_previous:
            return None
        try:
            return await self._migration_lookup(session_id)
        except Exception as err:
            logger.warning(
                "Session migration skipped for %s: %s", session_id, err
            )
            return None

    async def _migration_lookup(self, session_id: str) -> Any:
        logger.info(
            "Attempting to migrate session %s from previous secret", session_id
        )
        # a bare id carries no signature, so there is nothing to re-verify
        # against the previous secret; the session has to be re-established.
        raise MigrationSkipped(
            f"session {session_id} is unknown under the active secret"
        )

    async def load(self, cookie: str) -> tuple[Any, Optional[VerifiedCookie]]:
        """Verify a signed session cookie and load its session.

        Returns:
            Tuple of (session or None, verified cookie or None). When
            ``verified.resigned`` is True the caller must send
            ``verified.cookie`` back to the client.
        """
        verified = self.signer.verify(cookie)
        if verified is None:
            logger.debug("Session cookie failed verification")
            return None, None
        session = await self.get(verified.session_id)
        return session, verified

    def sign(self, session_id: str) -> str:
        return self.signer.sign(session_id)

    async def _new_id(self) -> str:
        factory = getattr(self.store, "new_id", None)
        if callable(factory):
            new_id = factory()
            if inspect.isawaitable(new_id):
                new_id = await new_id
            return new_id
        return uuid.uuid4().hex

    async def regenerate(self, record: SessionRecord) -> SessionRecord:
        """Move a session to a fresh identifier issued by the wrapped store."""
        new_id = await self._new_id()
        new = record.regenerate(new_id, keep=self.carry_over)
        new[SESSION_MIGRATED_KEY] = True
        await self.store.set(new_id, new.session_data())
        await self.store.destroy(record.session_id)
        return new

    def wrap(self, session_id: str, payload: Any) -> Optional[SessionRecord]:
        """Build a SessionRecord from a payload returned by ``get``."""
        if payload is None:
            return None
        if isinstance(payload, SessionRecord):
            return payload
        if isinstance(payload, Mapping):
            return SessionRecord(payload, id=session_id)
        raise TypeError(
            f"Unsupported session payload type: {type(payload).__name__}"
        )

    async def set(self, session_id: str, session: Any, *args, **kwargs) -> Any:
        return await self.store.set(session_id, session, *args, **kwargs)

    async def destroy(self, session_id: str, *args, **kwargs) -> Any:
        return await self.store.destroy(session_id, *args, **kwargs)

    async def touch(self, session_id: str, session: Any, *args, **kwargs) -> Any:
        return await self.store.touch(session_id, session, *args, **kwargs)
