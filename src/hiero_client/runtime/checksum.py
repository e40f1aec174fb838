"""
Entity id checksums.

A checksum is a five letter code derived from an entity id's "shard.realm.num"
string and the ledger identity. It is appended to the display form of an id
(``0.0.123-esxsf``) so that an id copied from one network is rejected on
another. It is never part of the wire encoding.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Union

from .errors import ChecksumError
from .ledger import LedgerId

if TYPE_CHECKING:
    from .entity_id import EntityId


P3 = 26 ** 3
P5 = 26 ** 5
MULTIPLIER = 1_000_003
WEIGHT = 31
CHECKSUM_LENGTH = 5


def generate_checksum(ledger_id: Union[LedgerId, bytes], address: str) -> str:
    """
    Compute the checksum for an address like "0.0.123".

    Args:
        ledger_id: Ledger identity (LedgerId or raw bytes)
        address: Entity id without checksum

    Returns:
        Five lowercase letters
    """
    ledger_bytes = ledger_id.to_bytes() if isinstance(ledger_id, LedgerId) else bytes(ledger_id)

    digits = [10 if ch == "." else int(ch) for ch in address]

    s = 0
    s0 = 0
    s1 = 0
    for i, d in enumerate(digits):
        s = (WEIGHT * s + d) % P3
        if i % 2 == 0:
            s0 = (s0 + d) % 11
        else:
            s1 = (s1 + d) % 11

    sh = 0
    for b in ledger_bytes + bytes(6):
        sh = (WEIGHT * sh + b) % P5

    c = ((((len(address) % 5) * 11 + s0) * 11 + s1) * P3 + s + sh) % P5
    c = (c * MULTIPLIER) % P5

    letters = []
    for _ in range(CHECKSUM_LENGTH):
        letters.append(chr(ord("a") + c % 26))
        c //= 26
    return "".join(reversed(letters))


def validate_checksum(entity_id: EntityId, ledger_id: LedgerId) -> None:
    """
    Check the checksum attached to an entity id against a ledger.

    Ids without an attached checksum always pass.

    Raises:
        ChecksumError: If the attached checksum does not match
    """
    given = entity_id.checksum
    if given is None:
        return
    expected = generate_checksum(ledger_id, entity_id.address)
    if given != expected:
        raise ChecksumError(given, expected, ledger_id.name)


__all__ = ["generate_checksum", "validate_checksum", "CHECKSUM_LENGTH"]
