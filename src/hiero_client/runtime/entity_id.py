"""
Entity identifiers (shard.realm.num) as Pydantic custom types.
"""

from __future__ import annotations
import re
from typing import Any, Optional, Tuple, TypeVar, Type, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from .checksum import generate_checksum, validate_checksum
from .errors import ErrorCode, ValidationError
from .ledger import LedgerId


ID_REGEX = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-([a-z]+))?$")

EntityIdT = TypeVar("EntityIdT", bound="EntityId")


def parse_entity_string(value: str) -> Tuple[int, int, int, Optional[str]]:
    """Split "0.0.123-abcde" into (shard, realm, num, checksum)."""
    match = ID_REGEX.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid format for entity ID: {value!r}", ErrorCode.INVALID_ENTITY_ID)
    shard, realm, num, checksum = match.groups()
    return int(shard), int(realm), int(num), checksum


class EntityId:
    """
    A (shard, realm, num) triple identifying an entity on the ledger.

    The optional checksum is carried for display and validation only: it does
    not take part in equality, hashing or the wire encoding.
    """

    __slots__ = ("_shard", "_realm", "_num", "_checksum")

    def __init__(self, shard: int = 0, realm: int = 0, num: int = 0, checksum: Optional[str] = None):
        for label, part in (("shard", shard), ("realm", realm), ("num", num)):
            if not isinstance(part, int) or isinstance(part, bool) or part < 0:
                raise ValidationError(f"{type(self).__name__} {label} must be a non-negative integer, got {part!r}",
                                      ErrorCode.INVALID_ENTITY_ID)
        self._shard = shard
        self._realm = realm
        self._num = num
        self._checksum = checksum

    @classmethod
    def from_string(cls: Type[EntityIdT], value: str) -> EntityIdT:
        shard, realm, num, checksum = parse_entity_string(value)
        return cls(shard, realm, num, checksum)

    @classmethod
    def coerce(cls: Type[EntityIdT], value: Union[EntityIdT, str, int]) -> EntityIdT:
        """Accept an id, its string form, or a bare entity number."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(0, 0, value)
        raise ValidationError(f"Cannot convert {value!r} to {cls.__name__}", ErrorCode.INVALID_ENTITY_ID)

    @property
    def shard(self) -> int:
        return self._shard

    @property
    def realm(self) -> int:
        return self._realm

    @property
    def num(self) -> int:
        return self._num

    @property
    def checksum(self) -> Optional[str]:
        return self._checksum

    @property
    def address(self) -> str:
        """The "shard.realm.num" form without checksum."""
        return f"{self._shard}.{self._realm}.{self._num}"

    def with_checksum(self: EntityIdT, checksum: Optional[str]) -> EntityIdT:
        return type(self)(self._shard, self._realm, self._num, checksum)

    def validate_checksum(self, ledger_id: LedgerId) -> None:
        validate_checksum(self, ledger_id)

    def to_string_with_checksum(self, ledger_id: LedgerId) -> str:
        return f"{self.address}-{generate_checksum(ledger_id, self.address)}"

    def __str__(self) -> str:
        return self.address

    def __repr__(self) -> str:
        if self._checksum:
            return f"{type(self).__name__}('{self.address}-{self._checksum}')"
        return f"{type(self).__name__}('{self.address}')"

    def _key(self) -> Tuple[int, int, int]:
        return (self._shard, self._realm, self._num)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, EntityId) and type(other) is type(self):
            return self._key() == other._key()
        return False

    def __lt__(self, other: EntityId) -> bool:
        if not isinstance(other, EntityId):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates the id."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _validate(cls, value: Any) -> EntityId:
        return cls.coerce(value)


class AccountId(EntityId):
    """Account identifier."""

    __slots__ = ()


class ContractId(EntityId):
    """Smart contract identifier."""

    __slots__ = ()


class TokenId(EntityId):
    """Token identifier."""

    __slots__ = ()


__all__ = [
    "EntityId",
    "AccountId",
    "ContractId",
    "TokenId",
    "parse_entity_string",
]
