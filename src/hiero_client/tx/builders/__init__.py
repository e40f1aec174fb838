"""
Transaction payloads.

Importing this package registers every payload type with the registry.
"""

from .base import TransactionPayload, ServiceDescriptor
from .registry import (
    PAYLOAD_REGISTRY,
    register_payload,
    payload_for_discriminator,
    payload_for_schedulable_discriminator,
    list_payload_types,
)
from .nodes import NodeCreateBody, NodeUpdateBody, NodeDeleteBody
from .schedule import ScheduleCreateBody

__all__ = [
    "TransactionPayload",
    "ServiceDescriptor",
    "PAYLOAD_REGISTRY",
    "register_payload",
    "payload_for_discriminator",
    "payload_for_schedulable_discriminator",
    "list_payload_types",
    "NodeCreateBody",
    "NodeUpdateBody",
    "NodeDeleteBody",
    "ScheduleCreateBody",
]
