"""
Randomness and digest capabilities.

The builder never touches ``secrets`` or ``hashlib`` directly. It is handed
a ``CryptoProvider`` so that tests can substitute deterministic stand-ins
without weakening the production sources.

``sha256`` is a coroutine: digesting is the single suspension point of a
build.
"""

from __future__ import annotations

import secrets
from typing import Protocol

from paydoc.app.utils.hashing import sha256_digest


class CryptoProvider(Protocol):
    """
    Interface for the random source and digest used during a build.

    Implementations must:
    - draw ``random_bytes`` from a cryptographically secure source
    - return exactly ``n`` bytes
    - raise (never return partial output) when unavailable
    """

    def random_bytes(self, n: int) -> bytes:
        ...

    async def sha256(self, data: bytes) -> bytes:
        ...


class SystemCryptoProvider:
    """
    Production provider backed by the operating system CSPRNG.
    """

    def random_bytes(self, n: int) -> bytes:
        if n <= 0:
            raise ValueError(f"random_bytes requires n > 0, got {n}")
        return secrets.token_bytes(n)

    async def sha256(self, data: bytes) -> bytes:
        return sha256_digest(data)
