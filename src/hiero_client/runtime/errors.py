"""
Hiero Error Model

This module provides the error handling framework for the transaction layer.
Every failure surfaced by the library is a HieroError carrying a stable
ErrorCode, so callers can branch on the code rather than on message text.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, Iterable
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes surfaced by the transaction layer."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    INVALID_ENTITY_ID = 3

    # Encoding errors (100-199)
    ENCODING_ERROR = 100
    INVALID_BINARY = 102
    MARSHAL_ERROR = 103
    UNMARSHAL_ERROR = 104
    UNKNOWN_TRANSACTION_BODY = 105

    # Authentication errors (300-399)
    INVALID_SIGNATURE = 302

    # Transaction errors (400-499)
    INVALID_TRANSACTION = 400
    TRANSACTION_FAILED = 401
    INCOMPLETE_TRANSACTION = 406
    TRANSACTION_FROZEN = 407
    TRANSACTION_NOT_FROZEN = 408
    MEMO_TOO_LONG = 409

    # Validation errors (500-599)
    INVALID_CHECKSUM = 505

    # Key errors (700-799)
    INVALID_KEY = 700


class HieroError(Exception):
    """
    Base class for all library errors.

    Provides structured error information: a message, an ErrorCode,
    optional details and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(HieroError):
    """Field and envelope validation errors, reported synchronously."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_TRANSACTION,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class ChecksumError(ValidationError):
    """An entity id checksum does not match the configured ledger."""

    def __init__(self, given: str, expected: str, ledger: str):
        message = (
            f"network mismatch or wrong checksum given, given checksum: {given}, "
            f"correct checksum {expected}, network: {ledger}"
        )
        super().__init__(
            message,
            ErrorCode.INVALID_CHECKSUM,
            {"given": given, "expected": expected, "ledger": ledger},
        )
        self.given = given
        self.expected = expected
        self.ledger = ledger


class FreezeStateError(HieroError):
    """A lifecycle operation was attempted in the wrong state."""

    def __init__(self, message: str = "transaction is immutable; it has at least one signature or has been explicitly frozen",
                 code: ErrorCode = ErrorCode.TRANSACTION_FROZEN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class ConstructionError(HieroError):
    """
    A required payload field was missing at freeze time.

    Recorded on the frozen transaction and raised only when the transaction
    is executed or converted to a schedulable body.
    """

    def __init__(self, message: str, missing_fields: Iterable[str] = (),
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        self.missing_fields = frozenset(missing_fields)
        if details is None and self.missing_fields:
            details = {"missing": sorted(self.missing_fields)}
        super().__init__(message, ErrorCode.INCOMPLETE_TRANSACTION, details, cause)


class IncompleteTransactionError(ConstructionError):
    """Raised by the schedule adapter for a transaction with a construction error."""
    pass


class DecodeError(HieroError):
    """Malformed or unrecognized bytes during decode."""

    def __init__(self, message: str = "Unmarshal error", code: ErrorCode = ErrorCode.UNMARSHAL_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class ExecuteError(HieroError):
    """Failure while handing a transaction to the network layer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.TRANSACTION_FAILED, details, cause)


class KeyFormatError(HieroError):
    """Invalid key material."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_KEY, details, cause)


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
]
