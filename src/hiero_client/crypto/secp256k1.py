"""
ECDSA secp256k1 cryptographic operations.

secp256k1 keys sign the Keccak-256 digest of the transaction body bytes and
produce the fixed 64-byte r||s form with a low-S value. Public keys travel
on the wire in the 33-byte compressed form.
"""

from __future__ import annotations
import hashlib
from typing import ClassVar, Optional

from Crypto.Hash import keccak
from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from ..keys.key import PrivateKey, PublicKey
from ..runtime.errors import KeyFormatError


DER_PRIVATE_PREFIX = bytes.fromhex("3030020100300706052b8104000a04220420")
DER_PUBLIC_PREFIX = bytes.fromhex("302d300706052b8104000a032200")


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (the pre-standard SHA-3) of data."""
    return keccak.new(digest_bits=256).update(data).digest()


class Secp256k1Error(KeyFormatError):
    """Invalid secp256k1 key material."""
    pass


class EcdsaSecp256k1PublicKey(PublicKey):
    """SECP256K1 public key for verification."""

    key_type: ClassVar[str] = "ecdsa_secp256k1"

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize public key.

        Args:
            public_key_bytes: Compressed (33), uncompressed (65) or DER key bytes

        Raises:
            Secp256k1Error: If the bytes are not a point on the curve
        """
        public_key_bytes = bytes(public_key_bytes)
        if len(public_key_bytes) == 47 and public_key_bytes.startswith(DER_PUBLIC_PREFIX):
            public_key_bytes = public_key_bytes[len(DER_PUBLIC_PREFIX):]
        if len(public_key_bytes) not in (33, 65):
            raise Secp256k1Error(f"secp256k1 public key must be 33 or 65 bytes, got {len(public_key_bytes)}")
        try:
            self._vk = VerifyingKey.from_string(public_key_bytes, curve=SECP256k1)
        except (MalformedPointError, ValueError) as e:
            raise Secp256k1Error(f"Invalid secp256k1 public key: {e}", cause=e)
        self._key_bytes = self._vk.to_string("compressed")

    @classmethod
    def from_hex(cls, hex_string: str) -> EcdsaSecp256k1PublicKey:
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Secp256k1Error(f"Invalid hex string: {e}", cause=e)
        return cls(key_bytes)

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> EcdsaSecp256k1PublicKey:
        return cls(key_bytes)

    def to_bytes(self) -> bytes:
        """Get the 33-byte compressed public key."""
        return self._key_bytes

    def to_bytes_uncompressed(self) -> bytes:
        return self._vk.to_string("uncompressed")

    def to_bytes_der(self) -> bytes:
        return DER_PUBLIC_PREFIX + self._key_bytes

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify an r||s signature over the Keccak-256 digest of message.

        Args:
            signature: 64-byte signature
            message: Message bytes (hashed before verification)

        Returns:
            True if signature is valid
        """
        if len(signature) != 64:
            return False
        try:
            return self._vk.verify_digest(signature, keccak256(message), sigdecode=sigdecode_string)
        except BadSignatureError:
            return False


class EcdsaSecp256k1PrivateKey(PrivateKey):
    """
    SECP256K1 private key.

    Signing is deterministic (RFC 6979) so the same body always yields the
    same signature.
    """

    def __init__(self, private_key_bytes: Optional[bytes] = None):
        """
        Initialize private key.

        Args:
            private_key_bytes: 32-byte private key (or its DER encoding);
                a random key is generated when omitted
        """
        if private_key_bytes is None:
            private_key_bytes = SigningKey.generate(curve=SECP256k1).to_string()
        private_key_bytes = bytes(private_key_bytes)
        if len(private_key_bytes) == 50 and private_key_bytes.startswith(DER_PRIVATE_PREFIX):
            private_key_bytes = private_key_bytes[len(DER_PRIVATE_PREFIX):]
        if len(private_key_bytes) != 32:
            raise Secp256k1Error(f"Private key must be 32 bytes, got {len(private_key_bytes)}")

        try:
            self._sk = SigningKey.from_string(private_key_bytes, curve=SECP256k1)
        except (MalformedPointError, ValueError) as e:
            raise Secp256k1Error(f"Invalid secp256k1 private key: {e}", cause=e)
        self._key_bytes = private_key_bytes
        self._public_key = EcdsaSecp256k1PublicKey(self._sk.get_verifying_key().to_string("compressed"))

    @classmethod
    def generate(cls) -> EcdsaSecp256k1PrivateKey:
        return cls(SigningKey.generate(curve=SECP256k1).to_string())

    @classmethod
    def from_hex(cls, hex_string: str) -> EcdsaSecp256k1PrivateKey:
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Secp256k1Error(f"Invalid hex string: {e}", cause=e)
        return cls(key_bytes)

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> EcdsaSecp256k1PrivateKey:
        return cls(key_bytes)

    def to_bytes(self) -> bytes:
        return self._key_bytes

    def to_bytes_der(self) -> bytes:
        return DER_PRIVATE_PREFIX + self._key_bytes

    def to_hex(self) -> str:
        return self._key_bytes.hex()

    def public_key(self) -> EcdsaSecp256k1PublicKey:
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """
        Sign the Keccak-256 digest of message.

        Returns:
            64-byte r||s signature with low S
        """
        digest = keccak256(message)
        return self._sk.sign_digest_deterministic(
            digest,
            hashfunc=hashlib.sha256,
            sigencode=sigencode_string_canonize,
        )

    def __str__(self) -> str:
        return f"EcdsaSecp256k1PrivateKey(public={self._public_key.to_hex()})"

    def __repr__(self) -> str:
        return self.__str__()


__all__ = [
    "EcdsaSecp256k1PublicKey",
    "EcdsaSecp256k1PrivateKey",
    "Secp256k1Error",
    "keccak256",
]
