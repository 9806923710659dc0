"""
Session migration step for aiohttp applications.

On every request the step looks at the current session:

* no session                                  -> passthrough;
* session carrying the authenticated principal -> passthrough (migrated);
* session without it (legacy/unauthenticated)  -> regenerated under a fresh
  id, when a previous secret exists and the active secret is strong enough.

Migration never fails a request: errors are logged and the request goes on
with the session it already had.
"""
import logging
from typing import Any, Optional
from collections.abc import Awaitable, Callable

from aiohttp import web

from ..conf import SESSION_ID, SESSION_OBJECT, SESSION_MIGRATED_KEY
from ..data import SessionRecord
from ..provider.config import SecretConfig
from ..provider.manager import SecretProvider, load_migration_context
from ..provider.models import MigrationContext
from .store import MigrationStore

logger = logging.getLogger("navigator.secret")

MIGRATION_STORE_KEY = web.AppKey("navigator_secret.store", MigrationStore)
MIGRATION_CONTEXT_KEY = web.AppKey("navigator_secret.context", MigrationContext)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


async def migrate_session(
    record: Optional[SessionRecord],
    store: MigrationStore
) -> Optional[SessionRecord]:
    """Run the migration step for one session.

    Returns:
        The session to continue the request with; a new record when the
        session was regenerated, otherwise ``record`` itself.
    """
    if record is None:
        return None
    if record.is_authenticated(store.principal_path):
        return record
    if record.new or record.get(SESSION_MIGRATED_KEY):
        return record
    context = store.context
    if not context.has_previous or not context.active.is_secure:
        logger.debug(
            "Session migration skipped: no previous secret or active secret "
            "is not secure"
        )
        return record
    logger.info("Attempting to migrate session %s from old secret", record.session_id)
    new = await store.regenerate(record)
    logger.info(
        "Successfully migrated session %s to %s", record.session_id, new.session_id
    )
    return new


def _request_record(
    request: web.Request,
    store: MigrationStore
) -> Optional[SessionRecord]:
    payload = request.get(SESSION_OBJECT)
    if payload is None:
        return None
    return store.wrap(request.get(SESSION_ID), payload)


def session_migration_middleware(
    cookie_name: Optional[str] = None,
    cookie_params: Optional[dict[str, Any]] = None,
):
    """Build the migration middleware.

    Args:
        cookie_name: name of the signed session cookie. When given, cookies
            signed with the previous secret are re-signed with the active one
            on the way out.
        cookie_params: attributes of the re-issued cookie (``path``,
            ``domain``, ``max_age``, ``secure``, ``samesite``, ...), passed
            to ``StreamResponse.set_cookie``. ``httponly`` defaults to True.
    """
    params = {"httponly": True, **(cookie_params or {})}

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        store = request.app.get(MIGRATION_STORE_KEY)
        if store is None:
            return await handler(request)
        resigned: Optional[str] = None
        try:
            if cookie_name and cookie_name in request.cookies:
                verified = store.signer.verify(request.cookies[cookie_name])
                if verified is not None:
                    request[SESSION_ID] = verified.session_id
                    if verified.resigned:
                        resigned = verified.cookie
            record = _request_record(request, store)
            migrated = await migrate_session(record, store)
            if migrated is not None and migrated is not record:
                request[SESSION_OBJECT] = migrated
                request[SESSION_ID] = migrated.session_id
                if cookie_name:
                    resigned = store.sign(migrated.session_id)
        except Exception as err:
            logger.error("Session migration error: %s", err)
        response = await handler(request)
        if resigned is not None and cookie_name:
            response.set_cookie(cookie_name, resigned, **params)
        return response

    return middleware


def setup(
    app: web.Application,
    store,
    config: Optional[SecretConfig] = None,
    provider: Optional[SecretProvider] = None,
    cookie_name: Optional[str] = None,
    carry_over=None,
    cookie_params: Optional[dict[str, Any]] = None,
) -> SecretProvider:
    """Install session migration on an application.

    Secrets are resolved and validated in an ``on_startup`` hook, so a missing
    or insecure secret aborts the application before it starts listening.

    Args:
        app: aiohttp application.
        store: session store to wrap.
        config: secret configuration (from the environment when omitted).
        provider: pre-built provider, takes precedence over ``config``.
        cookie_name: signed session cookie name, see the middleware.
        carry_over: session keys kept when a session is regenerated.
        cookie_params: attributes of the re-issued session cookie.
    """
    provider = provider or SecretProvider(config)

    async def _on_startup(app: web.Application) -> None:
        context = await load_migration_context(provider)
        app[MIGRATION_CONTEXT_KEY] = context
        app[MIGRATION_STORE_KEY] = MigrationStore(
            store,
            context,
            carry_over=carry_over,
            principal_path=provider.config.principal_path,
        )
        logger.info(
            "Session migration ready (previous secret: %s)",
            "yes" if context.has_previous else "no",
        )

    app.on_startup.append(_on_startup)
    app.middlewares.append(
        session_migration_middleware(cookie_name, cookie_params)
    )
    return provider
