"""
Base payload type.

A payload is the domain-specific part of a transaction: the field set of one
transaction kind. The envelope treats payloads only through this contract:
encode and decode the payload message, report which required fields are
unset, and name the wire discriminators and the service endpoint.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, List, Optional, Set, Tuple, Type, TypeVar, Union

from ...keys.key import KeyList
from ...runtime.entity_id import EntityId
from ...runtime.errors import FreezeStateError, ValidationError

PayloadT = TypeVar('PayloadT', bound='TransactionPayload')


def validate_optional(name: str, value: Any, expected: Union[type, Tuple[type, ...]]) -> Any:
    """Return value unchanged if it is None or of the expected type, else raise ValidationError."""
    if value is None or isinstance(value, expected):
        return value
    if isinstance(expected, tuple):
        wanted = " or ".join(t.__name__ for t in expected)
    else:
        wanted = expected.__name__
    raise ValidationError(f"{name} must be {wanted}, got {type(value).__name__}",
                          details={"field": name})


def validate_optional_bytes(name: str, value: Any) -> Optional[bytes]:
    """Like validate_optional for byte fields; a bytearray is copied to bytes."""
    value = validate_optional(name, value, (bytes, bytearray))
    return bytes(value) if value is not None else None


def _snapshot(value: Any) -> Any:
    if isinstance(value, KeyList):
        return value.frozen_copy()
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, list):
        return tuple(_snapshot(item) for item in value)
    return value


@dataclass(frozen=True)
class ServiceDescriptor:
    """Network service and method a payload is submitted to."""

    service: str
    method: str

    @property
    def path(self) -> str:
        return f"/{self.service}/{self.method}"

    def __str__(self) -> str:
        return f"{self.service}/{self.method}"


class TransactionPayload(ABC):
    """
    Base class for all transaction payloads.

    Subclasses declare:
        payload_discriminator: field number of the payload in TransactionBody
        schedulable_discriminator: field number in SchedulableTransactionBody,
            or None if the kind cannot be scheduled
        required_fields: attribute names that must be set before submission

    Once the owning transaction freezes, every public attribute is read-only,
    key lists and byte strings held by the payload included.
    """

    payload_discriminator: ClassVar[int]
    schedulable_discriminator: ClassVar[Optional[int]] = None
    required_fields: ClassVar[Tuple[str, ...]] = ()

    def __init__(self):
        self._frozen = False
        self._entity_validator: Optional[Callable[[EntityId], None]] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and getattr(self, "_frozen", False):
            raise FreezeStateError(details={"field": name})
        super().__setattr__(name, value)

    @property
    def payload_name(self) -> str:
        return type(self).__name__

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _require_not_frozen(self) -> None:
        if self._frozen:
            raise FreezeStateError()

    def _freeze(self) -> None:
        # nested values are replaced by immutable copies
        for name, value in list(vars(self).items()):
            if not name.startswith("_"):
                object.__setattr__(self, name, _snapshot(value))
        self._frozen = True

    def _bind_entity_validator(self, validator: Optional[Callable[[EntityId], None]]) -> None:
        self._entity_validator = validator

    def _set(self: PayloadT, name: str, value: Any) -> PayloadT:
        """Assign a field (chainable)."""
        self._require_not_frozen()
        setattr(self, name, value)
        return self

    def _set_entity(self: PayloadT, name: str, value: Union[EntityId, str, int, None],
                    cls: Type[EntityId]) -> PayloadT:
        """Assign an entity id field, validating its checksum when a validator is bound."""
        self._require_not_frozen()
        entity = cls.coerce(value) if value is not None else None
        if entity is not None and self._entity_validator is not None:
            self._entity_validator(entity)
        setattr(self, name, entity)
        return self

    def required_fields_unset(self) -> Set[str]:
        """Names of required fields that are still None."""
        return {name for name in self.required_fields if getattr(self, name, None) is None}

    def entity_ids(self) -> List[EntityId]:
        """Entity ids carried by the payload, for checksum validation."""
        return []

    @abstractmethod
    def encode_body(self) -> bytes:
        """Encode the payload message."""
        pass

    @classmethod
    @abstractmethod
    def decode_body(cls: Type[PayloadT], data: bytes) -> PayloadT:
        """Rebuild a payload from its message bytes."""
        pass

    @abstractmethod
    def target_service_endpoint(self) -> ServiceDescriptor:
        pass

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return False
        return self.encode_body() == other.encode_body()

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
