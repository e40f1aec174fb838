"""
Hash functions used by the transaction layer.
"""

import hashlib


def sha384_bytes(input_bytes: bytes) -> bytes:
    """
    Compute SHA-384 hash of input bytes.

    Transaction hashes are the SHA-384 digest of the signed transaction bytes.

    Returns:
        SHA-384 hash as bytes (48 bytes)
    """
    return hashlib.sha384(input_bytes).digest()


__all__ = ["sha384_bytes"]
