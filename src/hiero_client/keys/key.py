"""
Key abstractions.

A Key is anything that can authorize a transaction: a single public key, or a
(possibly nested) KeyList that may carry a threshold. Every key can report the
public keys it contains; signature collection is keyed on those.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterable, Iterator, List, Optional

from ..runtime.errors import FreezeStateError, ValidationError


class Key(ABC):
    """Base class for everything that can appear in a key slot."""

    @abstractmethod
    def public_keys(self) -> List[PublicKey]:
        """Flattened list of public keys, in declaration order."""
        pass


class PublicKey(Key):
    """
    A single public key.

    Public keys compare and hash by their raw bytes, so the same key decoded
    twice is the same dictionary key.
    """

    key_type: ClassVar[str] = ""

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Raw public key bytes as carried on the wire."""
        pass

    @abstractmethod
    def verify(self, signature: bytes, message: bytes) -> bool:
        """Verify a signature over the signable bytes."""
        pass

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def public_keys(self) -> List[PublicKey]:
        return [self]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return type(self) is type(other) and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash((self.key_type, self.to_bytes()))

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.to_hex()})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.from_hex('{self.to_hex()}')"


class PrivateKey(ABC):
    """A private key able to sign the signable bytes of a transaction body."""

    @abstractmethod
    def public_key(self) -> PublicKey:
        pass

    @abstractmethod
    def sign(self, message: bytes) -> bytes:
        pass


class KeyList(Key):
    """
    An ordered list of keys, optionally with a signing threshold.

    With ``threshold`` set this is a threshold key (M of N). Lists may nest.
    Whether enough signatures are present is decided by the network, never
    here. A frozen copy (see ``frozen_copy``) rejects every change.
    """

    def __init__(self, keys: Optional[Iterable[Key]] = None, threshold: Optional[int] = None):
        self._frozen = False
        self._keys: List[Key] = []
        for key in keys or ():
            self.add(key)
        self.threshold = threshold

    @classmethod
    def of(cls, *keys: Key) -> KeyList:
        return cls(keys)

    @property
    def keys(self) -> List[Key]:
        return list(self._keys)

    @property
    def threshold(self) -> Optional[int]:
        return self._threshold

    @threshold.setter
    def threshold(self, threshold: Optional[int]) -> None:
        self._require_not_frozen()
        if threshold is not None and (not isinstance(threshold, int) or isinstance(threshold, bool)
                                      or threshold < 0):
            raise ValidationError(f"KeyList threshold must be a non-negative integer, got {threshold!r}")
        self._threshold = threshold

    @property
    def is_threshold(self) -> bool:
        return self._threshold is not None

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _require_not_frozen(self) -> None:
        if self._frozen:
            raise FreezeStateError("key list belongs to a frozen transaction and cannot change")

    def add(self, key: Key) -> KeyList:
        self._require_not_frozen()
        if not isinstance(key, Key):
            raise ValidationError(f"KeyList entries must be keys, got {type(key).__name__}")
        self._keys.append(key)
        return self

    def frozen_copy(self) -> KeyList:
        """Immutable copy of this list, nested lists included."""
        if self._frozen:
            return self
        copy = KeyList([key.frozen_copy() if isinstance(key, KeyList) else key for key in self._keys],
                       self._threshold)
        copy._frozen = True
        return copy

    def public_keys(self) -> List[PublicKey]:
        result: List[PublicKey] = []
        for key in self._keys:
            for public_key in key.public_keys():
                if public_key not in result:
                    result.append(public_key)
        return result

    def __contains__(self, key: Any) -> bool:
        return key in self.public_keys()

    def __iter__(self) -> Iterator[Key]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, KeyList):
            return False
        return self._threshold == other._threshold and self._keys == other._keys

    def __repr__(self) -> str:
        if self._threshold is not None:
            return f"KeyList({self._keys!r}, threshold={self._threshold})"
        return f"KeyList({self._keys!r})"


__all__ = ["Key", "PublicKey", "PrivateKey", "KeyList"]
