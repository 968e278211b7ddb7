"""
Cryptographic primitives for pay documents.

Current scope:
- SHA-256 digests over raw bytes
- lowercase hex encoding of digests and random identifiers

Explicit non-scope:
- signing of any kind (pay documents are unsigned in this revision)
- text normalization (callers trim and UTF-8 encode before hashing)
"""

import hashlib
from typing import Union


def sha256_digest(data: Union[bytes, bytearray]) -> bytes:
    """
    Compute a raw 32-byte SHA-256 digest.

    IMPORTANT:
    - Input MUST already be bytes.
    - No encoding or trimming happens here.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(
            "sha256_digest expects bytes, "
            f"got {type(data).__name__}"
        )

    return hashlib.sha256(data).digest()


def to_hex(data: Union[bytes, bytearray]) -> str:
    """Lowercase, zero-padded hex encoding."""
    return bytes(data).hex()
