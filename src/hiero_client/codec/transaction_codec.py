"""
Transaction Codec

Encodes and decodes the envelope messages around a payload:
TransactionBody, SchedulableTransactionBody, SignedTransaction, Transaction
and TransactionList. Payload bytes are opaque at this level; they are
identified only by the number of the field that carries them (the payload
discriminator) and are dispatched to payload types by the caller.
"""

from dataclasses import dataclass, field as dataclass_field
from typing import List, Optional, Tuple

from ..runtime.entity_id import AccountId
from ..runtime.errors import DecodeError
from ..runtime.transaction_id import TransactionId
from ..signers.signature_map import SignatureMap
from .messages import (
    decode_account_id,
    decode_duration,
    decode_signature_map,
    decode_transaction_id,
    encode_account_id,
    encode_duration,
    encode_signature_map,
    encode_transaction_id,
)
from .reader import FieldValue, ProtoReader, expect_bytes, expect_int, parse_fields
from .writer import ProtoWriter


# TransactionBody
BODY_TRANSACTION_ID = 1
BODY_NODE_ACCOUNT_ID = 2
BODY_TRANSACTION_FEE = 3
BODY_VALID_DURATION = 4
BODY_GENERATE_RECORD = 5
BODY_MEMO = 6
COMMON_BODY_FIELDS = frozenset({
    BODY_TRANSACTION_ID, BODY_NODE_ACCOUNT_ID, BODY_TRANSACTION_FEE,
    BODY_VALID_DURATION, BODY_GENERATE_RECORD, BODY_MEMO,
})

# SchedulableTransactionBody
SCHEDULABLE_TRANSACTION_FEE = 1
SCHEDULABLE_MEMO = 2
COMMON_SCHEDULABLE_FIELDS = frozenset({SCHEDULABLE_TRANSACTION_FEE, SCHEDULABLE_MEMO})

# SignedTransaction
SIGNED_BODY_BYTES = 1
SIGNED_SIG_MAP = 2

# Transaction
TRANSACTION_SIGNED_BYTES = 5

# TransactionList
TRANSACTION_LIST_ENTRY = 1


@dataclass
class BodyFields:
    """The fields of one decoded TransactionBody."""

    transaction_id: Optional[TransactionId] = None
    node_account_id: Optional[AccountId] = None
    transaction_fee: int = 0
    valid_duration: Optional[int] = None
    memo: str = ""
    data_field: Optional[int] = None
    data: bytes = b""


@dataclass
class SchedulableFields:
    """The fields of one decoded SchedulableTransactionBody."""

    transaction_fee: int = 0
    memo: str = ""
    data_field: Optional[int] = None
    data: bytes = b""


@dataclass
class SignedTransactionParts:
    body_bytes: bytes
    sig_map: SignatureMap = dataclass_field(default_factory=SignatureMap)


def _split_payload(data: bytes, common: frozenset) -> Tuple[dict, Optional[int], bytes]:
    """
    Separate common fields from the payload oneof.

    Any field outside ``common`` is a payload candidate; as with any oneof the
    last one present wins.
    """
    fields = {}
    data_field = None
    payload = b""
    for number, _wire_type, value in ProtoReader(data).fields():
        if number in common:
            fields.setdefault(number, []).append(value)
        else:
            data_field = number
            payload = expect_bytes(value, f"payload field {number}")
    return fields, data_field, payload


def _last(fields: dict, number: int) -> Optional[FieldValue]:
    values = fields.get(number)
    return values[-1] if values else None


def _memo(fields: dict, number: int) -> str:
    raw = _last(fields, number)
    if raw is None:
        return ""
    try:
        return expect_bytes(raw, "memo").decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Memo is not valid UTF-8: {e}", cause=e) from e


def _fee(fields: dict, number: int) -> int:
    raw = _last(fields, number)
    return 0 if raw is None else expect_int(raw, "transactionFee")


class TransactionCodec:
    """
    Codec for the envelope messages.

    Encoding follows proto3 rules: unset and default scalar fields are
    omitted, so a decoded message re-encodes to the same bytes.
    """

    @staticmethod
    def encode_body(
        transaction_id: Optional[TransactionId],
        node_account_id: Optional[AccountId],
        transaction_fee: int,
        valid_duration: Optional[int],
        memo: str,
        data_field: int,
        data: bytes,
    ) -> bytes:
        """
        Encode a TransactionBody.

        Args:
            transaction_id: Transaction id, omitted when None
            node_account_id: Node the body is addressed to, omitted when None
            transaction_fee: Max fee in tinybars
            valid_duration: Valid duration in seconds, omitted when None
            memo: Transaction memo
            data_field: Payload discriminator
            data: Encoded payload message

        Returns:
            TransactionBody bytes
        """
        w = ProtoWriter()
        if transaction_id is not None:
            w.message_field(BODY_TRANSACTION_ID, encode_transaction_id(transaction_id))
        if node_account_id is not None:
            w.message_field(BODY_NODE_ACCOUNT_ID, encode_account_id(node_account_id))
        w.uint64_field(BODY_TRANSACTION_FEE, transaction_fee)
        if valid_duration is not None:
            w.message_field(BODY_VALID_DURATION, encode_duration(valid_duration))
        w.string_field(BODY_MEMO, memo)
        w.message_field(data_field, data)
        return w.to_bytes()

    @staticmethod
    def decode_body(data: bytes) -> BodyFields:
        """
        Decode a TransactionBody.

        Raises:
            DecodeError: If the bytes are malformed or carry no payload
        """
        fields, data_field, payload = _split_payload(data, COMMON_BODY_FIELDS)
        if data_field is None:
            raise DecodeError("Transaction body carries no payload")

        body = BodyFields(data_field=data_field, data=payload)
        raw = _last(fields, BODY_TRANSACTION_ID)
        if raw is not None:
            body.transaction_id = decode_transaction_id(expect_bytes(raw, "transactionID"))
        raw = _last(fields, BODY_NODE_ACCOUNT_ID)
        if raw is not None:
            body.node_account_id = decode_account_id(expect_bytes(raw, "nodeAccountID"))
        body.transaction_fee = _fee(fields, BODY_TRANSACTION_FEE)
        raw = _last(fields, BODY_VALID_DURATION)
        if raw is not None:
            body.valid_duration = decode_duration(expect_bytes(raw, "transactionValidDuration"))
        body.memo = _memo(fields, BODY_MEMO)
        return body

    @staticmethod
    def encode_schedulable_body(transaction_fee: int, memo: str, data_field: int, data: bytes) -> bytes:
        """Encode a SchedulableTransactionBody."""
        w = ProtoWriter()
        w.uint64_field(SCHEDULABLE_TRANSACTION_FEE, transaction_fee)
        w.string_field(SCHEDULABLE_MEMO, memo)
        w.message_field(data_field, data)
        return w.to_bytes()

    @staticmethod
    def decode_schedulable_body(data: bytes) -> SchedulableFields:
        fields, data_field, payload = _split_payload(data, COMMON_SCHEDULABLE_FIELDS)
        if data_field is None:
            raise DecodeError("Schedulable body carries no payload")
        return SchedulableFields(
            transaction_fee=_fee(fields, SCHEDULABLE_TRANSACTION_FEE),
            memo=_memo(fields, SCHEDULABLE_MEMO),
            data_field=data_field,
            data=payload,
        )

    @staticmethod
    def encode_signed_transaction(body_bytes: bytes, sig_map: SignatureMap) -> bytes:
        w = ProtoWriter()
        w.bytes_field(SIGNED_BODY_BYTES, body_bytes)
        w.message_field(SIGNED_SIG_MAP, encode_signature_map(sig_map))
        return w.to_bytes()

    @staticmethod
    def decode_signed_transaction(data: bytes) -> SignedTransactionParts:
        fields = parse_fields(data)
        body_bytes = _last(fields, SIGNED_BODY_BYTES)
        if body_bytes is None:
            raise DecodeError("Signed transaction carries no body bytes")
        sig_map_bytes = _last(fields, SIGNED_SIG_MAP)
        sig_map = decode_signature_map(expect_bytes(sig_map_bytes, "sigMap")) if sig_map_bytes is not None else SignatureMap()
        return SignedTransactionParts(expect_bytes(body_bytes, "bodyBytes"), sig_map)

    @staticmethod
    def encode_transaction(signed_transaction_bytes: bytes) -> bytes:
        w = ProtoWriter()
        w.bytes_field(TRANSACTION_SIGNED_BYTES, signed_transaction_bytes, always=True)
        return w.to_bytes()

    @staticmethod
    def decode_transaction(data: bytes) -> bytes:
        """Return the signedTransactionBytes of a Transaction message."""
        signed = _last(parse_fields(data), TRANSACTION_SIGNED_BYTES)
        if signed is None:
            raise DecodeError("Transaction carries no signed transaction bytes")
        return expect_bytes(signed, "signedTransactionBytes")

    @staticmethod
    def encode_transaction_list(transactions: List[bytes]) -> bytes:
        w = ProtoWriter()
        for transaction in transactions:
            w.message_field(TRANSACTION_LIST_ENTRY, transaction)
        return w.to_bytes()

    @staticmethod
    def decode_transaction_list(data: bytes) -> List[bytes]:
        """
        Return the Transaction messages of a TransactionList.

        Raises:
            DecodeError: If the list is malformed or empty
        """
        entries = parse_fields(data).get(TRANSACTION_LIST_ENTRY, [])
        if not entries:
            raise DecodeError("Transaction list is empty")
        return [expect_bytes(entry, "transaction_list") for entry in entries]


__all__ = [
    "TransactionCodec",
    "BodyFields",
    "SchedulableFields",
    "SignedTransactionParts",
]
