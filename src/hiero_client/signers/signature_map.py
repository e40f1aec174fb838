"""
Signature collection for transaction bodies.

A SignatureMap holds the signatures gathered for one node body, keyed by
public key. Adding a signature for a key that already signed replaces the
earlier signature in place; no key ever appears twice.

Threshold sufficiency is never checked here. The network decides whether
the collected signatures satisfy the required keys.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union
import logging

from ..keys.key import Key, KeyList, PublicKey
from ..runtime.errors import ValidationError

logger = logging.getLogger(__name__)


class SignatureMap:
    """
    Insertion-ordered mapping of public key to signature bytes. Two maps are
    equal when they hold the same pairs, in any order.
    """

    def __init__(self, pairs: Optional[Mapping[PublicKey, bytes]] = None):
        self._signatures: Dict[PublicKey, bytes] = {}
        for public_key, signature in (pairs or {}).items():
            self.add(public_key, signature)

    @staticmethod
    def check_pair(public_key: PublicKey, signature: bytes) -> None:
        """
        Raise ValidationError unless the pair can be stored.

        Raises:
            ValidationError: If the key or signature has the wrong type
        """
        if not isinstance(public_key, PublicKey):
            raise ValidationError(f"Signatures are keyed by public key, got {type(public_key).__name__}",
                                  details={"key_type": type(public_key).__name__})
        if not isinstance(signature, (bytes, bytearray)):
            raise ValidationError(f"Signature must be bytes, got {type(signature).__name__}")

    def add(self, public_key: PublicKey, signature: bytes) -> bool:
        """
        Add a signature for public_key.

        Args:
            public_key: Key that produced the signature
            signature: Raw signature bytes

        Returns:
            True if an existing signature for the key was replaced

        Raises:
            ValidationError: If the key or signature has the wrong type
        """
        self.check_pair(public_key, signature)
        replaced = public_key in self._signatures
        self._signatures[public_key] = bytes(signature)

        if replaced:
            logger.debug(f"Replaced signature for {public_key.to_hex()[:16]}...")
        else:
            logger.debug(f"Added signature for {public_key.to_hex()[:16]}... ({len(self._signatures)} total)")
        return replaced

    def add_for_key(self, key: Key, signatures: Union[bytes, Mapping[PublicKey, bytes]]) -> None:
        """
        Add signatures on behalf of a key.

        A single public key takes one signature. A KeyList (threshold or not)
        takes a mapping from member public keys to signatures. If any entry is
        not a member of the list or has the wrong type, nothing is added.

        Raises:
            ValidationError: If the signatures do not fit the key
        """
        if isinstance(key, PublicKey):
            if isinstance(signatures, Mapping):
                if set(signatures) != {key}:
                    raise ValidationError("A single public key takes exactly its own signature")
                signatures = signatures[key]
            self.add(key, signatures)
            return

        if not isinstance(key, KeyList):
            raise ValidationError(f"Unsupported key kind: {type(key).__name__}")
        if not isinstance(signatures, Mapping):
            raise ValidationError("A KeyList takes a mapping of public key to signature")

        members = key.public_keys()
        for public_key, signature in signatures.items():
            self.check_pair(public_key, signature)
            if public_key not in members:
                raise ValidationError(f"Public key {public_key} is not part of the key list")
        for public_key, signature in signatures.items():
            self.add(public_key, signature)

    def get(self, public_key: PublicKey) -> Optional[bytes]:
        return self._signatures.get(public_key)

    def public_keys(self) -> List[PublicKey]:
        return list(self._signatures)

    def items(self) -> List[Tuple[PublicKey, bytes]]:
        return list(self._signatures.items())

    def to_dict(self) -> Dict[PublicKey, bytes]:
        return dict(self._signatures)

    def copy(self) -> SignatureMap:
        return SignatureMap(self._signatures)

    def __contains__(self, public_key: object) -> bool:
        return public_key in self._signatures

    def __iter__(self) -> Iterator[PublicKey]:
        return iter(self._signatures)

    def __len__(self) -> int:
        return len(self._signatures)

    def __bool__(self) -> bool:
        return bool(self._signatures)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignatureMap):
            return False
        return self._signatures == other._signatures

    def __repr__(self) -> str:
        return f"SignatureMap({len(self._signatures)} signatures)"


__all__ = ["SignatureMap"]
