"""
Ed25519 cryptographic operations.

Ed25519 keys sign the transaction body bytes directly. Public keys are the
raw 32-byte form; private keys are the 32-byte seed, optionally wrapped in
the PKCS#8 DER prefix used by exported keys.
"""

from __future__ import annotations
import hashlib
from typing import ClassVar, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey,
)

from ..keys.key import PrivateKey, PublicKey
from ..runtime.errors import KeyFormatError


# PKCS#8 / SubjectPublicKeyInfo prefixes for raw Ed25519 keys
DER_PRIVATE_PREFIX = bytes.fromhex("302e020100300506032b657004220420")
DER_PUBLIC_PREFIX = bytes.fromhex("302a300506032b6570032100")


class Ed25519Error(KeyFormatError):
    """Invalid Ed25519 key material."""
    pass


class Ed25519PublicKey(PublicKey):
    """
    Ed25519 public key.

    Provides verification operations and serialization.
    """

    key_type: ClassVar[str] = "ed25519"

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize from 32-byte public key.

        Args:
            public_key_bytes: 32-byte Ed25519 public key (or its DER encoding)

        Raises:
            Ed25519Error: If key is invalid
        """
        public_key_bytes = bytes(public_key_bytes)
        if len(public_key_bytes) == 44 and public_key_bytes.startswith(DER_PUBLIC_PREFIX):
            public_key_bytes = public_key_bytes[len(DER_PUBLIC_PREFIX):]
        if len(public_key_bytes) != 32:
            raise Ed25519Error(f"Ed25519 public key must be 32 bytes, got {len(public_key_bytes)}")

        self._key_bytes = public_key_bytes
        try:
            self._crypto_key = CryptoEd25519PublicKey.from_public_bytes(public_key_bytes)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 public key: {e}", cause=e)

    @classmethod
    def from_hex(cls, hex_string: str) -> Ed25519PublicKey:
        """Create public key from hex string."""
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Ed25519Error(f"Invalid hex string: {e}", cause=e)
        return cls(key_bytes)

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> Ed25519PublicKey:
        """Create public key from bytes."""
        return cls(key_bytes)

    def to_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self._key_bytes

    def to_bytes_der(self) -> bytes:
        return DER_PUBLIC_PREFIX + self._key_bytes

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify a signature against a message.

        Args:
            signature: 64-byte Ed25519 signature
            message: Message that was signed

        Returns:
            True if signature is valid
        """
        if len(signature) != 64:
            return False
        try:
            self._crypto_key.verify(signature, message)
        except InvalidSignature:
            return False
        return True


class Ed25519PrivateKey(PrivateKey):
    """
    Ed25519 private key.

    Provides signing operations and key derivation.
    """

    def __init__(self, private_key_bytes: bytes):
        """
        Initialize from 32-byte private key seed.

        Args:
            private_key_bytes: 32-byte Ed25519 seed (or its DER encoding)

        Raises:
            Ed25519Error: If key is invalid
        """
        private_key_bytes = bytes(private_key_bytes)
        if len(private_key_bytes) == 48 and private_key_bytes.startswith(DER_PRIVATE_PREFIX):
            private_key_bytes = private_key_bytes[len(DER_PRIVATE_PREFIX):]
        if len(private_key_bytes) != 32:
            raise Ed25519Error(f"Ed25519 private key must be 32 bytes, got {len(private_key_bytes)}")

        self._key_bytes = private_key_bytes
        try:
            self._crypto_key = CryptoEd25519PrivateKey.from_private_bytes(private_key_bytes)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 private key: {e}", cause=e)
        self._public_key = Ed25519PublicKey(
            self._crypto_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        )

    @classmethod
    def generate(cls) -> Ed25519PrivateKey:
        """Generate a new random Ed25519 private key."""
        crypto_key = CryptoEd25519PrivateKey.generate()
        private_bytes = crypto_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return cls(private_bytes)

    @classmethod
    def from_hex(cls, hex_string: str) -> Ed25519PrivateKey:
        """Create private key from hex string (raw or DER)."""
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Ed25519Error(f"Invalid hex string: {e}", cause=e)
        return cls(key_bytes)

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> Ed25519PrivateKey:
        """Create private key from bytes."""
        return cls(key_bytes)

    @classmethod
    def from_seed(cls, seed: Union[str, bytes]) -> Ed25519PrivateKey:
        """
        Derive private key from seed using SHA-256.

        For deterministic test keys.
        """
        if isinstance(seed, str):
            seed = seed.encode('utf-8')
        return cls(hashlib.sha256(seed).digest())

    def to_bytes(self) -> bytes:
        """Get the 32-byte private key seed."""
        return self._key_bytes

    def to_bytes_der(self) -> bytes:
        return DER_PRIVATE_PREFIX + self._key_bytes

    def to_hex(self) -> str:
        return self._key_bytes.hex()

    def public_key(self) -> Ed25519PublicKey:
        """Get the corresponding public key."""
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Message to sign

        Returns:
            64-byte Ed25519 signature
        """
        return self._crypto_key.sign(message)

    def __str__(self) -> str:
        return f"Ed25519PrivateKey(public={self._public_key.to_hex()})"

    def __repr__(self) -> str:
        return self.__str__()


__all__ = [
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
    "Ed25519Error",
]
