"""
Payload registry.

Maps wire discriminators to payload classes so decoding can dispatch on the
field number that carries the payload.
"""

from typing import Dict, List, Type

from ...runtime.errors import DecodeError, ErrorCode
from .base import TransactionPayload

# TransactionBody field number -> payload class
PAYLOAD_REGISTRY: Dict[int, Type[TransactionPayload]] = {}

# SchedulableTransactionBody field number -> payload class
SCHEDULABLE_REGISTRY: Dict[int, Type[TransactionPayload]] = {}


def register_payload(payload_cls: Type[TransactionPayload]) -> Type[TransactionPayload]:
    """
    Register a payload class under its discriminators (class decorator).

    Raises:
        ValueError: If a discriminator is already taken by another class
    """
    discriminator = payload_cls.payload_discriminator
    existing = PAYLOAD_REGISTRY.get(discriminator)
    if existing is not None and existing is not payload_cls:
        raise ValueError(f"Discriminator {discriminator} already registered for {existing.__name__}")
    PAYLOAD_REGISTRY[discriminator] = payload_cls

    schedulable = payload_cls.schedulable_discriminator
    if schedulable is not None:
        existing = SCHEDULABLE_REGISTRY.get(schedulable)
        if existing is not None and existing is not payload_cls:
            raise ValueError(f"Schedulable discriminator {schedulable} already registered for {existing.__name__}")
        SCHEDULABLE_REGISTRY[schedulable] = payload_cls
    return payload_cls


def payload_for_discriminator(discriminator: int) -> Type[TransactionPayload]:
    """
    Get the payload class for a TransactionBody field number.

    Raises:
        DecodeError: If no payload is registered for the number
    """
    payload_cls = PAYLOAD_REGISTRY.get(discriminator)
    if payload_cls is None:
        raise DecodeError(f"Unknown transaction body kind: field {discriminator}",
                          ErrorCode.UNKNOWN_TRANSACTION_BODY)
    return payload_cls


def payload_for_schedulable_discriminator(discriminator: int) -> Type[TransactionPayload]:
    """
    Get the payload class for a SchedulableTransactionBody field number.

    Raises:
        DecodeError: If no payload is registered for the number
    """
    payload_cls = SCHEDULABLE_REGISTRY.get(discriminator)
    if payload_cls is None:
        raise DecodeError(f"Unknown schedulable body kind: field {discriminator}",
                          ErrorCode.UNKNOWN_TRANSACTION_BODY)
    return payload_cls


def list_payload_types() -> List[str]:
    """
    Get list of all registered payload type names.

    Returns:
        Payload class names ordered by discriminator
    """
    return [PAYLOAD_REGISTRY[number].__name__ for number in sorted(PAYLOAD_REGISTRY)]


__all__ = [
    'PAYLOAD_REGISTRY',
    'SCHEDULABLE_REGISTRY',
    'register_payload',
    'payload_for_discriminator',
    'payload_for_schedulable_discriminator',
    'list_payload_types',
]
