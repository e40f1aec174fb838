"""
Transaction construction: payloads, the envelope, scheduling and execution handoff.
"""

from .builders import (
    TransactionPayload,
    ServiceDescriptor,
    PAYLOAD_REGISTRY,
    register_payload,
    payload_for_discriminator,
    payload_for_schedulable_discriminator,
    list_payload_types,
    NodeCreateBody,
    NodeUpdateBody,
    NodeDeleteBody,
    ScheduleCreateBody,
)
from .schedule import SchedulableBody, to_schedulable
from .execute import (
    RetryPolicy,
    SubmissionRequest,
    TransactionReceipt,
    TransactionResponse,
    submit,
)
from .transaction import (
    Transaction,
    transaction_from_bytes,
    DEFAULT_MAX_TRANSACTION_FEE,
    DEFAULT_VALID_DURATION,
    MAX_MEMO_BYTES,
)

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
    "SchedulableBody",
    "to_schedulable",
    "RetryPolicy",
    "SubmissionRequest",
    "TransactionReceipt",
    "TransactionResponse",
    "submit",
    "Transaction",
    "transaction_from_bytes",
    "DEFAULT_MAX_TRANSACTION_FEE",
    "DEFAULT_VALID_DURATION",
    "MAX_MEMO_BYTES",
]
