"""Runtime value types: errors, ledger identity, entity ids, checksums and ids."""

from .errors import (
    ErrorCode,
    HieroError,
    ValidationError,
    ChecksumError,
    FreezeStateError,
    ConstructionError,
    IncompleteTransactionError,
    DecodeError,
    ExecuteError,
    KeyFormatError,
)
from .ledger import LedgerId
from .checksum import generate_checksum, validate_checksum
from .entity_id import EntityId, AccountId, ContractId, TokenId
from .transaction_id import Timestamp, TransactionId
from .endpoint import Endpoint

__all__ = [
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
]
