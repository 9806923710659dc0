"""
Cookie Signing - dual-secret verification of session cookies.

Cookie format: ``<session_id>.<base64url(HMAC-SHA256(key, session_id))>``
where ``key = HKDF(secret, "navigator-session-cookie")``.

Verification tries the active secret first and then the previous one; a
cookie that only verifies against the previous secret is re-signed with the
active secret so the client picks up the new signature on its next response.

Security Note:
    Never log secrets, derived keys or signatures.
"""
import base64
import binascii
import logging
from typing import NamedTuple, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..provider.models import MigrationContext, Secret

logger = logging.getLogger("navigator.secret")

KEY_LENGTH = 32
_COOKIE_CONTEXT = b"navigator-session-cookie"
_SEPARATOR = "."


class VerifiedCookie(NamedTuple):
    session_id: str
    cookie: str
    resigned: bool


def derive_key(secret: Secret) -> bytes:
    """Derive a 32-byte signing key from a secret using HKDF-SHA256."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,
        info=_COOKIE_CONTEXT,
    )
    return hkdf.derive(secret.value.encode("utf-8"))


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


class CookieSigner:
    """Signs session ids with the active secret, verifies with all candidates."""

    def __init__(self, context: MigrationContext):
        self.context = context
        # secret values are immutable, derive once.
        self._keys = [
            (secret, derive_key(secret)) for secret in context.candidates()
        ]

    def _hmac(self, key: bytes, session_id: str) -> hmac.HMAC:
        h = hmac.HMAC(key, hashes.SHA256())
        h.update(session_id.encode("utf-8"))
        return h

    def sign(self, session_id: str) -> str:
        _, key = self._keys[0]
        signature = self._hmac(key, session_id).finalize()
        return f"{session_id}{_SEPARATOR}{_b64encode(signature)}"

    def unsign(self, cookie: str) -> Optional[tuple[str, Secret]]:
        """Return (session_id, secret that verified it), or None."""
        session_id, sep, encoded = cookie.rpartition(_SEPARATOR)
        if not sep or not session_id or not encoded:
            return None
        try:
            signature = _b64decode(encoded)
        except (binascii.Error, ValueError):
            return None
        for secret, key in self._keys:
            try:
                self._hmac(key, session_id).verify(signature)
            except InvalidSignature:
                continue
            return session_id, secret
        return None

    def verify(self, cookie: str) -> Optional[VerifiedCookie]:
        """Verify a cookie, re-signing it when the previous secret matched."""
        result = self.unsign(cookie)
        if result is None:
            return None
        session_id, secret = result
        if secret.same_as(self.context.active):
            return VerifiedCookie(session_id, cookie, False)
        logger.info(
            "Session %s signed with previous secret, re-signing", session_id
        )
        return VerifiedCookie(session_id, self.sign(session_id), True)
