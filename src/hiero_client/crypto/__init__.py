"""
Cryptographic primitives: Ed25519 and ECDSA secp256k1 keys.
"""

from ..keys.key import PrivateKey
from ..runtime.errors import KeyFormatError
from .ed25519 import Ed25519PublicKey, Ed25519PrivateKey, Ed25519Error
from .ed25519 import DER_PRIVATE_PREFIX as _ED25519_DER_PRIVATE_PREFIX
from .secp256k1 import EcdsaSecp256k1PublicKey, EcdsaSecp256k1PrivateKey, Secp256k1Error, keccak256
from .secp256k1 import DER_PRIVATE_PREFIX as _SECP256K1_DER_PRIVATE_PREFIX


def private_key_from_string(value: str) -> PrivateKey:
    """
    Parse a hex encoded private key.

    DER encoded keys carry their algorithm in the prefix. A bare 32-byte hex
    key is read as Ed25519 unless prefixed with ``ecdsa:``.

    Raises:
        KeyFormatError: If the string is not a recognizable key
    """
    text = value.strip()
    if text.lower().startswith("ecdsa:"):
        return EcdsaSecp256k1PrivateKey.from_hex(text[6:].removeprefix("0x"))
    if text.lower().startswith("ed25519:"):
        return Ed25519PrivateKey.from_hex(text[8:].removeprefix("0x"))
    text = text.removeprefix("0x")
    try:
        raw = bytes.fromhex(text)
    except ValueError as e:
        raise KeyFormatError(f"Invalid hex private key: {e}", cause=e)
    if raw.startswith(_SECP256K1_DER_PRIVATE_PREFIX):
        return EcdsaSecp256k1PrivateKey(raw)
    if raw.startswith(_ED25519_DER_PRIVATE_PREFIX) or len(raw) == 32:
        return Ed25519PrivateKey(raw)
    raise KeyFormatError(f"Unrecognized private key encoding ({len(raw)} bytes)")


__all__ = [
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
    "Ed25519Error",
    "EcdsaSecp256k1PublicKey",
    "EcdsaSecp256k1PrivateKey",
    "Secp256k1Error",
    "keccak256",
    "private_key_from_string",
]
