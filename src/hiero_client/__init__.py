"""
Hiero Python Client - Transaction Construction

This package builds, freezes, signs and serializes Hiero transactions and
hands them to an injected submitter for execution.
"""

# Runtime value types and errors
from .runtime.errors import *
from .runtime import (
    LedgerId,
    generate_checksum,
    validate_checksum,
    EntityId,
    AccountId,
    ContractId,
    TokenId,
    Timestamp,
    TransactionId,
    Endpoint,
)

# Keys and signing
from .keys import *
from .crypto import (
    Ed25519PublicKey,
    Ed25519PrivateKey,
    EcdsaSecp256k1PublicKey,
    EcdsaSecp256k1PrivateKey,
    private_key_from_string,
)
from .signers import *

# Wire codec
from .codec import TransactionCodec, ProtoWriter, ProtoReader

# Transactions
from .tx import *

# Client context
from .client import Client, ClientConfig, Operator

__version__ = "0.1.0"
__all__ = [
    # Errors
    "ErrorCode",
    "HieroError",
    "ValidationError",
    "ChecksumError",
    "FreezeStateError",
    "ConstructionError",
    "IncompleteTransactionError",
    "DecodeError",
    "ExecuteError",
    "KeyFormatError",
    # Runtime
    "LedgerId",
    "generate_checksum",
    "validate_checksum",
    "EntityId",
    "AccountId",
    "ContractId",
    "TokenId",
    "Timestamp",
    "TransactionId",
    "Endpoint",
    # Keys
    "Key",
    "PublicKey",
    "PrivateKey",
    "KeyList",
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
    "EcdsaSecp256k1PublicKey",
    "EcdsaSecp256k1PrivateKey",
    "private_key_from_string",
    "SignatureMap",
    # Codec
    "TransactionCodec",
    "ProtoWriter",
    "ProtoReader",
    # Transactions
    "TransactionPayload",
    "ServiceDescriptor",
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
    "Transaction",
    "transaction_from_bytes",
    # Client
    "Client",
    "ClientConfig",
    "Operator",
]
