"""
Wire encoding of the shared messages: entity ids, timestamps, transaction
ids, endpoints, keys, wrapper values and signature maps.

Each ``encode_*`` function returns the bytes of the message itself (without
tag); callers embed it with ``ProtoWriter.message_field``. Each ``decode_*``
function consumes a complete message and raises DecodeError on anything it
cannot represent.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Type

from ..crypto.ed25519 import Ed25519PublicKey
from ..crypto.secp256k1 import EcdsaSecp256k1PublicKey
from ..keys.key import Key, KeyList, PublicKey
from ..runtime.endpoint import Endpoint
from ..runtime.entity_id import AccountId, EntityId
from ..runtime.errors import DecodeError, ErrorCode, HieroError, ValidationError
from ..runtime.transaction_id import Timestamp, TransactionId
from ..signers.signature_map import SignatureMap
from .reader import FieldValue, ProtoReader, expect_bytes, expect_int, last_value, parse_fields, to_signed64
from .writer import ProtoWriter


# Key oneof
KEY_ED25519 = 2
KEY_THRESHOLD = 5
KEY_LIST = 6
KEY_ECDSA_SECP256K1 = 7
UNSUPPORTED_KEY_FIELDS = {1: "contractID", 3: "RSA_3072", 4: "ECDSA_384", 8: "delegatable_contract_id"}

# SignaturePair
SIG_PUB_KEY_PREFIX = 1
SIG_ED25519 = 3
SIG_ECDSA_SECP256K1 = 6
UNSUPPORTED_SIGNATURE_FIELDS = {2: "contract", 4: "RSA_3072", 5: "ECDSA_384"}


@contextmanager
def decoding(what: str) -> Iterator[None]:
    """Turn validation failures while rebuilding a value into DecodeError."""
    try:
        yield
    except DecodeError:
        raise
    except (HieroError, ValueError) as e:
        raise DecodeError(f"Invalid {what}: {e}", cause=e) from e


def _int(fields: Dict[int, List[FieldValue]], number: int, what: str, signed: bool = True) -> int:
    value = expect_int(last_value(fields, number, 0), what)
    return to_signed64(value) if signed else value


def _bytes(fields: Dict[int, List[FieldValue]], number: int, what: str) -> Optional[bytes]:
    value = last_value(fields, number)
    if value is None:
        return None
    return expect_bytes(value, what)


# Entity ids

def encode_entity_id(entity_id: EntityId) -> bytes:
    w = ProtoWriter()
    w.int64_field(1, entity_id.shard)
    w.int64_field(2, entity_id.realm)
    w.int64_field(3, entity_id.num)
    return w.to_bytes()


encode_account_id = encode_entity_id


def decode_entity_id(data: bytes, cls: Type[EntityId] = AccountId) -> EntityId:
    fields = parse_fields(data)
    if 4 in fields:
        raise DecodeError("Account aliases are not supported", ErrorCode.UNKNOWN_TRANSACTION_BODY)
    with decoding(cls.__name__):
        return cls(
            _int(fields, 1, "shard"),
            _int(fields, 2, "realm"),
            _int(fields, 3, "num"),
        )


def decode_account_id(data: bytes) -> AccountId:
    return decode_entity_id(data, AccountId)


# Time

def encode_timestamp(timestamp: Timestamp) -> bytes:
    w = ProtoWriter()
    w.int64_field(1, timestamp.seconds)
    w.int32_field(2, timestamp.nanos)
    return w.to_bytes()


def decode_timestamp(data: bytes) -> Timestamp:
    fields = parse_fields(data)
    with decoding("timestamp"):
        return Timestamp(seconds=_int(fields, 1, "seconds"), nanos=_int(fields, 2, "nanos"))


def encode_duration(seconds: int) -> bytes:
    w = ProtoWriter()
    w.int64_field(1, seconds)
    return w.to_bytes()


def decode_duration(data: bytes) -> int:
    return _int(parse_fields(data), 1, "duration seconds")


# Transaction id

def encode_transaction_id(transaction_id: TransactionId) -> bytes:
    w = ProtoWriter()
    w.message_field(1, encode_timestamp(transaction_id.valid_start))
    w.message_field(2, encode_account_id(transaction_id.account_id))
    w.bool_field(3, transaction_id.scheduled)
    w.int32_field(4, transaction_id.nonce)
    return w.to_bytes()


def decode_transaction_id(data: bytes) -> TransactionId:
    fields = parse_fields(data)
    valid_start = _bytes(fields, 1, "transactionValidStart")
    account = _bytes(fields, 2, "accountID")
    if valid_start is None or account is None:
        raise DecodeError("Transaction id is missing its valid start or account")
    with decoding("transaction id"):
        return TransactionId(
            account_id=decode_account_id(account),
            valid_start=decode_timestamp(valid_start),
            scheduled=bool(_int(fields, 3, "scheduled")),
            nonce=_int(fields, 4, "nonce"),
        )


# Endpoints

def encode_endpoint(endpoint: Endpoint) -> bytes:
    w = ProtoWriter()
    w.bytes_field(1, endpoint.address)
    w.int32_field(2, endpoint.port)
    w.string_field(3, endpoint.domain_name)
    return w.to_bytes()


def decode_endpoint(data: bytes) -> Endpoint:
    fields = parse_fields(data)
    address = _bytes(fields, 1, "ipAddressV4")
    domain = _bytes(fields, 3, "domain_name")
    with decoding("endpoint"):
        return Endpoint(
            address=address or None,
            port=_int(fields, 2, "port"),
            domain_name=domain.decode("utf-8") if domain else None,
        )


# Wrapper values (google.protobuf.*Value)

def encode_string_value(value: str) -> bytes:
    w = ProtoWriter()
    w.string_field(1, value)
    return w.to_bytes()


def decode_string_value(data: bytes) -> str:
    raw = _bytes(parse_fields(data), 1, "StringValue") or b""
    with decoding("StringValue"):
        return raw.decode("utf-8")


def encode_bytes_value(value: bytes) -> bytes:
    w = ProtoWriter()
    w.bytes_field(1, value)
    return w.to_bytes()


def decode_bytes_value(data: bytes) -> bytes:
    return _bytes(parse_fields(data), 1, "BytesValue") or b""


def encode_bool_value(value: bool) -> bytes:
    w = ProtoWriter()
    w.bool_field(1, value)
    return w.to_bytes()


def decode_bool_value(data: bytes) -> bool:
    return bool(_int(parse_fields(data), 1, "BoolValue", signed=False))


# Keys

def encode_key(key: Key) -> bytes:
    """Encode a key as the Key oneof message."""
    w = ProtoWriter()
    if isinstance(key, Ed25519PublicKey):
        w.bytes_field(KEY_ED25519, key.to_bytes(), always=True)
    elif isinstance(key, EcdsaSecp256k1PublicKey):
        w.bytes_field(KEY_ECDSA_SECP256K1, key.to_bytes(), always=True)
    elif isinstance(key, KeyList):
        key_list = encode_key_list(key)
        if key.threshold is not None:
            threshold = ProtoWriter()
            threshold.uint32_field(1, key.threshold)
            threshold.message_field(2, key_list)
            w.message_field(KEY_THRESHOLD, threshold.to_bytes())
        else:
            w.message_field(KEY_LIST, key_list)
    else:
        raise ValidationError(f"Cannot encode key of type {type(key).__name__}", ErrorCode.MARSHAL_ERROR)
    return w.to_bytes()


def encode_key_list(key_list: KeyList) -> bytes:
    w = ProtoWriter()
    for key in key_list:
        w.message_field(1, encode_key(key))
    return w.to_bytes()


def decode_key(data: bytes) -> Key:
    """Decode the Key oneof; the last key field present wins."""
    selected = None
    for field, _wire_type, value in ProtoReader(data).fields():
        if field in UNSUPPORTED_KEY_FIELDS:
            raise DecodeError(f"Unsupported key kind: {UNSUPPORTED_KEY_FIELDS[field]}")
        if field in (KEY_ED25519, KEY_THRESHOLD, KEY_LIST, KEY_ECDSA_SECP256K1):
            selected = (field, expect_bytes(value, "key"))
    if selected is None:
        raise DecodeError("Key message has no key set")

    field, value = selected
    with decoding("key"):
        if field == KEY_ED25519:
            return Ed25519PublicKey(value)
        if field == KEY_ECDSA_SECP256K1:
            return EcdsaSecp256k1PublicKey(value)
        if field == KEY_LIST:
            return decode_key_list(value)
        threshold_fields = parse_fields(value)
        keys = decode_key_list(_bytes(threshold_fields, 2, "ThresholdKey.keys") or b"")
        return KeyList(keys, threshold=_int(threshold_fields, 1, "threshold", signed=False))


def decode_key_list(data: bytes) -> KeyList:
    keys = [decode_key(expect_bytes(value, "KeyList.keys")) for value in parse_fields(data).get(1, [])]
    return KeyList(keys)


# Signatures

def public_key_from_signature_pair(prefix: bytes, signature_field: int) -> PublicKey:
    if signature_field == SIG_ED25519:
        return Ed25519PublicKey(prefix)
    return EcdsaSecp256k1PublicKey(prefix)


def encode_signature_map(signatures: SignatureMap) -> bytes:
    """
    Encode a SignatureMap. The full public key is used as the prefix.
    """
    w = ProtoWriter()
    for public_key, signature in signatures.items():
        pair = ProtoWriter()
        pair.bytes_field(SIG_PUB_KEY_PREFIX, public_key.to_bytes())
        if isinstance(public_key, Ed25519PublicKey):
            pair.bytes_field(SIG_ED25519, signature, always=True)
        elif isinstance(public_key, EcdsaSecp256k1PublicKey):
            pair.bytes_field(SIG_ECDSA_SECP256K1, signature, always=True)
        else:
            raise ValidationError(f"Cannot encode signature for key type {type(public_key).__name__}",
                                  ErrorCode.MARSHAL_ERROR)
        w.message_field(1, pair.to_bytes())
    return w.to_bytes()


def decode_signature_map(data: bytes) -> SignatureMap:
    signatures = SignatureMap()
    for value in parse_fields(data).get(1, []):
        pair = parse_fields(expect_bytes(value, "sigPair"))
        for field, name in UNSUPPORTED_SIGNATURE_FIELDS.items():
            if field in pair:
                raise DecodeError(f"Unsupported signature kind: {name}")
        prefix = _bytes(pair, SIG_PUB_KEY_PREFIX, "pubKeyPrefix") or b""
        if SIG_ED25519 in pair:
            signature_field = SIG_ED25519
        elif SIG_ECDSA_SECP256K1 in pair:
            signature_field = SIG_ECDSA_SECP256K1
        else:
            raise DecodeError("Signature pair carries no signature")
        signature = _bytes(pair, signature_field, "signature")
        with decoding("signature pair"):
            signatures.add(public_key_from_signature_pair(prefix, signature_field), signature)
    return signatures


__all__ = [
    "decoding",
    "encode_entity_id",
    "encode_account_id",
    "decode_entity_id",
    "decode_account_id",
    "encode_timestamp",
    "decode_timestamp",
    "encode_duration",
    "decode_duration",
    "encode_transaction_id",
    "decode_transaction_id",
    "encode_endpoint",
    "decode_endpoint",
    "encode_string_value",
    "decode_string_value",
    "encode_bytes_value",
    "decode_bytes_value",
    "encode_bool_value",
    "decode_bool_value",
    "encode_key",
    "encode_key_list",
    "decode_key",
    "decode_key_list",
    "encode_signature_map",
    "decode_signature_map",
]
