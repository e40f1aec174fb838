"""
Ledger identity.

A LedgerId is the network identity a client is configured for. Entity id
checksums are derived from it, so the same id renders a different checksum on
mainnet, testnet and previewnet.
"""

from __future__ import annotations
from typing import Any, Union

from .errors import ValidationError


_NAMED_LEDGERS = {
    "mainnet": b"\x00",
    "testnet": b"\x01",
    "previewnet": b"\x02",
}


class LedgerId:
    """Network identity as raw bytes."""

    def __init__(self, ledger_bytes: bytes):
        if not isinstance(ledger_bytes, (bytes, bytearray)):
            raise ValidationError(f"LedgerId must be bytes, got {type(ledger_bytes)}")
        self._bytes = bytes(ledger_bytes)

    @classmethod
    def mainnet(cls) -> LedgerId:
        return cls(_NAMED_LEDGERS["mainnet"])

    @classmethod
    def testnet(cls) -> LedgerId:
        return cls(_NAMED_LEDGERS["testnet"])

    @classmethod
    def previewnet(cls) -> LedgerId:
        return cls(_NAMED_LEDGERS["previewnet"])

    @classmethod
    def from_string(cls, value: str) -> LedgerId:
        """
        Parse a ledger name or hex string.

        Args:
            value: 'mainnet', 'testnet', 'previewnet' or a hex string

        Returns:
            LedgerId
        """
        named = _NAMED_LEDGERS.get(value.lower())
        if named is not None:
            return cls(named)
        try:
            return cls(bytes.fromhex(value))
        except ValueError as e:
            raise ValidationError(f"Invalid ledger id: {value!r}", cause=e)

    @classmethod
    def coerce(cls, value: Union[LedgerId, str, bytes]) -> LedgerId:
        if isinstance(value, LedgerId):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        return cls(value)

    def to_bytes(self) -> bytes:
        return self._bytes

    @property
    def name(self) -> str:
        """Human name used in error messages."""
        for name, value in _NAMED_LEDGERS.items():
            if value == self._bytes:
                return name
        return self._bytes.hex()

    def is_mainnet(self) -> bool:
        return self._bytes == _NAMED_LEDGERS["mainnet"]

    def is_testnet(self) -> bool:
        return self._bytes == _NAMED_LEDGERS["testnet"]

    def is_previewnet(self) -> bool:
        return self._bytes == _NAMED_LEDGERS["previewnet"]

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, LedgerId):
            return self._bytes == other._bytes
        return False

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"LedgerId('{self.name}')"


__all__ = ["LedgerId"]
