from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations embed a random per-call salt in the digest and MUST NOT
    raise from :meth:`verify` on malformed digests.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, digest: str) -> bool: ...

    def dummy_verify(self, plaintext: str) -> None:
        """Spend the cost of one verification without a real digest."""


class PlainPrefixHasher(PasswordHasher):
    """Fast, insecure hasher for unit tests that do not exercise hashing."""

    prefix = "plain$"

    def hash(self, plaintext: str) -> str:
        return f"{self.prefix}{plaintext[::-1]}"

    def verify(self, plaintext: str, digest: str) -> bool:
        if not isinstance(digest, str) or not digest.startswith(self.prefix):
            return False
        return digest == self.hash(plaintext)

    def dummy_verify(self, plaintext: str) -> None:
        return None
