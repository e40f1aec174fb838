"""
Schedule adapter.

Converts a transaction into the reduced body used for delegated ("scheduled")
execution. Only the fee ceiling, the memo and the payload are kept; the
transaction id, node and valid duration are assigned when the schedule
itself executes.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any
import logging

from ..codec.transaction_codec import TransactionCodec
from ..runtime.errors import IncompleteTransactionError, ValidationError
from .builders.base import TransactionPayload
from .builders.registry import payload_for_schedulable_discriminator

if TYPE_CHECKING:
    from .transaction import Transaction

logger = logging.getLogger(__name__)


class SchedulableBody:
    """
    Fee, memo and payload of a transaction, ready to be scheduled.

    The payload is a frozen snapshot; later changes to the source transaction
    do not reach it.
    """

    def __init__(self, payload: TransactionPayload, transaction_fee: int = 0, memo: str = ""):
        if payload.schedulable_discriminator is None:
            raise ValidationError(f"{payload.payload_name} transactions cannot be scheduled")
        snapshot = type(payload).decode_body(payload.encode_body())
        snapshot._freeze()
        self._payload = snapshot
        self._transaction_fee = transaction_fee
        self._memo = memo

    @property
    def payload(self) -> TransactionPayload:
        return self._payload

    @property
    def transaction_fee(self) -> int:
        return self._transaction_fee

    @property
    def memo(self) -> str:
        return self._memo

    def to_bytes(self) -> bytes:
        """Encode as a SchedulableTransactionBody message."""
        return TransactionCodec.encode_schedulable_body(
            self._transaction_fee,
            self._memo,
            self._payload.schedulable_discriminator,
            self._payload.encode_body(),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> SchedulableBody:
        """
        Decode a SchedulableTransactionBody message.

        Raises:
            DecodeError: If the bytes are malformed or the payload kind is unknown
        """
        fields = TransactionCodec.decode_schedulable_body(data)
        payload_cls = payload_for_schedulable_discriminator(fields.data_field)
        logger.debug(f"Decoding schedulable {payload_cls.__name__}")
        payload = payload_cls.decode_body(fields.data)
        return cls(payload, fields.transaction_fee, fields.memo)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SchedulableBody):
            return False
        return self.to_bytes() == other.to_bytes()

    __hash__ = None

    def __repr__(self) -> str:
        return f"SchedulableBody({self._payload!r}, fee={self._transaction_fee}, memo={self._memo!r})"


def to_schedulable(transaction: Transaction) -> SchedulableBody:
    """
    Reduce a transaction to its schedulable body.

    A frozen transaction is refused if it recorded a construction error at
    freeze time; a mutable one is put through the same required-field check.

    Raises:
        IncompleteTransactionError: If a required payload field is missing
        ValidationError: If the payload kind cannot be scheduled
    """
    error = transaction.construction_error
    if transaction.is_frozen:
        missing = error.missing_fields if error is not None else frozenset()
    else:
        missing = frozenset(transaction.payload.required_fields_unset())
    if missing:
        raise IncompleteTransactionError(
            f"{transaction.payload.payload_name} is missing required fields: {', '.join(sorted(missing))}",
            missing,
        )

    body = SchedulableBody(
        transaction.payload,
        transaction_fee=transaction.max_transaction_fee or 0,
        memo=transaction.transaction_memo,
    )
    logger.debug(f"Built schedulable body for {transaction.payload.payload_name}")
    return body


__all__ = ["SchedulableBody", "to_schedulable"]
