"""Password hashing backed by :mod:`werkzeug.security`."""

from __future__ import annotations

import logging
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from blog_api.services._shared.ports.password_hasher import PasswordHasher

logger = logging.getLogger(__name__)


class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted, deliberately slow hashing via Werkzeug.

    Digests are self-describing (``method$salt$hash``) so the method can be
    raised later without invalidating stored passwords.

    :param method: Werkzeug method string, e.g. ``"scrypt:32768:8:1"``.
    :param salt_length: Length of the random salt embedded in each digest.
    """

    def __init__(self, *, method: str = "scrypt:32768:8:1", salt_length: int = 16) -> None:
        self.method = method
        self.salt_length = salt_length
        # Reference digest for unknown identities; its plaintext is never known.
        self._dummy_digest = generate_password_hash(
            secrets.token_urlsafe(16), method=method, salt_length=salt_length
        )

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(
            plaintext, method=self.method, salt_length=self.salt_length
        )

    def verify(self, plaintext: str, digest: str) -> bool:
        if not digest or not isinstance(digest, str):
            return False
        try:
            return check_password_hash(digest, plaintext)
        except (ValueError, TypeError, AttributeError):
            logger.warning("Unverifiable password digest", extra={"reason": "malformed_digest"})
            return False

    def dummy_verify(self, plaintext: str) -> None:
        check_password_hash(self._dummy_digest, plaintext)
