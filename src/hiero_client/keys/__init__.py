"""
Key abstractions shared by the signers and the payload types.
"""

from .key import Key, PublicKey, PrivateKey, KeyList

__all__ = [
    "Key",
    "PublicKey",
    "PrivateKey",
    "KeyList",
]
