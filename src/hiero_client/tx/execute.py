"""
Transaction execution handoff.

The transaction layer never talks to the network itself. ``execute`` builds a
SubmissionRequest holding the per-node transaction bytes and hands it to the
submitter injected on the client; receipts are fetched the same way through
the client's receipt source. Retrying is left to those injected callables.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple
import logging

from pydantic import BaseModel, Field

from ..runtime.entity_id import AccountId
from ..runtime.errors import ExecuteError, HieroError
from ..runtime.transaction_id import TransactionId
from .builders.base import ServiceDescriptor

if TYPE_CHECKING:
    from ..client import Client

logger = logging.getLogger(__name__)


DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MIN_BACKOFF = 0.25
DEFAULT_MAX_BACKOFF = 8.0


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and backoff settings carried to the submitter."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    min_backoff: float = DEFAULT_MIN_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    regenerate_transaction_id: bool = True

    def backoff_for(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (0-based)."""
        return min(self.max_backoff, self.min_backoff * (2 ** attempt))


class TransactionReceipt(BaseModel):
    """Outcome of a transaction as reported by the network."""

    status: str
    transaction_id: Optional[TransactionId] = Field(default=None, alias="transactionId")
    account_id: Optional[AccountId] = Field(default=None, alias="accountId")
    node_id: Optional[int] = Field(default=None, alias="nodeId")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_success(self) -> bool:
        return self.status == "SUCCESS"


class TransactionResponse(BaseModel):
    """Acknowledgement returned by the submitter for an accepted transaction."""

    transaction_id: TransactionId = Field(alias="transactionId")
    node_id: AccountId = Field(alias="nodeId")
    transaction_hash: bytes = Field(default=b"", alias="transactionHash")

    model_config = {"populate_by_name": True, "frozen": True}

    def get_receipt(self, client: Client) -> TransactionReceipt:
        """
        Fetch the receipt through the client's receipt source.

        Raises:
            ExecuteError: If no receipt source is configured or it fails
        """
        source = client.receipt_source
        if source is None:
            raise ExecuteError("No receipt source configured on the client")

        logger.debug(f"Fetching receipt for {self.transaction_id}")
        try:
            receipt = source(self)
        except HieroError:
            raise
        except Exception as e:
            raise ExecuteError(f"Receipt lookup for {self.transaction_id} failed: {e}", cause=e) from e

        if isinstance(receipt, TransactionReceipt):
            return receipt
        if isinstance(receipt, dict):
            return TransactionReceipt.model_validate(receipt)
        raise ExecuteError(f"Receipt source returned {type(receipt).__name__}, expected TransactionReceipt")


@dataclass(frozen=True)
class SubmissionRequest:
    """
    Everything the network layer needs to submit a frozen, signed transaction.

    ``transactions`` holds one encoded Transaction message per node, in the
    same order as ``node_account_ids``.
    """

    transaction_id: TransactionId
    node_account_ids: Tuple[AccountId, ...]
    transactions: Tuple[bytes, ...]
    transaction_hashes: Tuple[bytes, ...]
    service: ServiceDescriptor
    retry_policy: RetryPolicy

    def transaction_for_node(self, node_account_id: AccountId) -> bytes:
        try:
            index = self.node_account_ids.index(node_account_id)
        except ValueError:
            raise ExecuteError(f"Transaction is not addressed to node {node_account_id}") from None
        return self.transactions[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionId": str(self.transaction_id),
            "nodeAccountIds": [str(node) for node in self.node_account_ids],
            "service": str(self.service),
            "maxAttempts": self.retry_policy.max_attempts,
        }


Submitter = Callable[[SubmissionRequest], TransactionResponse]
ReceiptSource = Callable[[TransactionResponse], TransactionReceipt]


def submit(client: Client, request: SubmissionRequest) -> TransactionResponse:
    """
    Hand a request to the client's submitter.

    Raises:
        ExecuteError: If no submitter is configured, it fails with a non-library
            error, or it returns something other than a TransactionResponse
    """
    submitter = client.submitter
    if submitter is None:
        raise ExecuteError("No submitter configured on the client", details=request.to_dict())

    logger.debug(
        f"Submitting {request.transaction_id} to {request.service} "
        f"({len(request.node_account_ids)} nodes)"
    )
    try:
        response = submitter(request)
    except HieroError:
        raise
    except Exception as e:
        raise ExecuteError(f"Submission of {request.transaction_id} failed: {e}",
                           details=request.to_dict(), cause=e) from e

    if not isinstance(response, TransactionResponse):
        raise ExecuteError(f"Submitter returned {type(response).__name__}, expected TransactionResponse",
                           details=request.to_dict())
    logger.debug(f"Transaction {response.transaction_id} accepted by node {response.node_id}")
    return response


__all__ = [
    "RetryPolicy",
    "TransactionReceipt",
    "TransactionResponse",
    "SubmissionRequest",
    "Submitter",
    "ReceiptSource",
    "submit",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MIN_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
]
