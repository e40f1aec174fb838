"""
Wire codec for the transaction layer.

Protobuf-compatible writer and reader, encoders for the shared messages and
the envelope codec.
"""

from .writer import ProtoWriter
from .reader import ProtoReader, parse_fields
from .hashes import sha384_bytes
from .transaction_codec import TransactionCodec, BodyFields, SchedulableFields, SignedTransactionParts

__all__ = [
    "ProtoWriter",
    "ProtoReader",
    "parse_fields",
    "sha384_bytes",
    "TransactionCodec",
    "BodyFields",
    "SchedulableFields",
    "SignedTransactionParts",
]
