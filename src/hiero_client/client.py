"""
Hiero client

Holds what transactions need from their surroundings: the ledger they target,
the node network, the operator that pays and signs, and the injected
submitter and receipt source that do the actual network work.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
import logging
import os

from .crypto import private_key_from_string
from .keys.key import PrivateKey, PublicKey
from .runtime.entity_id import AccountId
from .runtime.errors import ValidationError
from .runtime.ledger import LedgerId
from .tx.execute import ReceiptSource, Submitter


# Default consensus node account ids per network
NETWORKS: Dict[str, List[str]] = {
    'mainnet': [f"0.0.{num}" for num in range(3, 10)],
    'testnet': [f"0.0.{num}" for num in range(3, 8)],
    'previewnet': [f"0.0.{num}" for num in range(3, 7)],
}


@dataclass
class ClientConfig:
    """Configuration for the Hiero client."""

    ledger_id: LedgerId = field(default_factory=LedgerId.testnet)
    network: List[AccountId] = field(default_factory=list)
    auto_validate_checksums: bool = False
    default_max_transaction_fee: Optional[int] = None
    default_transaction_valid_duration: Optional[int] = None
    max_attempts: Optional[int] = None
    min_backoff: Optional[float] = None
    max_backoff: Optional[float] = None
    debug: bool = False


@dataclass(frozen=True)
class Operator:
    """Account that pays for transactions and the key that signs for it."""

    account_id: AccountId
    private_key: PrivateKey

    @property
    def public_key(self) -> PublicKey:
        return self.private_key.public_key()


class Client:
    """
    Context for building and executing transactions.

    The client does no networking of its own; execution is delegated to the
    ``submitter`` callable and receipts to ``receipt_source``.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        operator: Optional[Operator] = None,
        submitter: Optional[Submitter] = None,
        receipt_source: Optional[ReceiptSource] = None,
    ):
        self.config = config or ClientConfig()
        self.config.ledger_id = LedgerId.coerce(self.config.ledger_id)
        self.config.network = [AccountId.coerce(node) for node in self.config.network]
        if not self.config.network and self.config.ledger_id.name in NETWORKS:
            self.config.network = [AccountId.from_string(node) for node in NETWORKS[self.config.ledger_id.name]]

        self.logger = logging.getLogger(__name__)
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

        self.operator = operator
        self.submitter = submitter
        self.receipt_source = receipt_source

    @classmethod
    def for_name(cls, name: str, **kwargs) -> Client:
        """
        Create a client for a named network.

        Args:
            name: 'mainnet', 'testnet' or 'previewnet'
            **kwargs: Forwarded to ClientConfig
        """
        ledger_id = LedgerId.from_string(name)
        return cls(ClientConfig(ledger_id=ledger_id, **kwargs))

    @classmethod
    def for_mainnet(cls, **kwargs) -> Client:
        return cls.for_name('mainnet', **kwargs)

    @classmethod
    def for_testnet(cls, **kwargs) -> Client:
        return cls.for_name('testnet', **kwargs)

    @classmethod
    def for_previewnet(cls, **kwargs) -> Client:
        return cls.for_name('previewnet', **kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> Client:
        """
        Create a client from environment variables.

        Reads HIERO_NETWORK (default testnet) and, when both are present,
        OPERATOR_ID and OPERATOR_KEY.
        """
        environ = os.environ if environ is None else environ
        client = cls.for_name(environ.get('HIERO_NETWORK', 'testnet'))
        operator_id = environ.get('OPERATOR_ID')
        operator_key = environ.get('OPERATOR_KEY')
        if operator_id and operator_key:
            client.set_operator(operator_id, private_key_from_string(operator_key))
        elif operator_id or operator_key:
            raise ValidationError("OPERATOR_ID and OPERATOR_KEY must be set together")
        return client

    def set_operator(self, account_id: Union[AccountId, str], private_key: PrivateKey) -> Client:
        """Set the account that pays for and signs transactions."""
        account_id = AccountId.coerce(account_id)
        if self.auto_validate_checksums:
            account_id.validate_checksum(self.ledger_id)
        self.operator = Operator(account_id, private_key)
        self.logger.debug(f"Operator set to {account_id}")
        return self

    def set_auto_validate_checksums(self, enabled: bool) -> Client:
        self.config.auto_validate_checksums = bool(enabled)
        return self

    def set_submitter(self, submitter: Optional[Submitter]) -> Client:
        self.submitter = submitter
        return self

    def set_receipt_source(self, receipt_source: Optional[ReceiptSource]) -> Client:
        self.receipt_source = receipt_source
        return self

    @property
    def ledger_id(self) -> LedgerId:
        return self.config.ledger_id

    @property
    def network(self) -> List[AccountId]:
        return list(self.config.network)

    @property
    def auto_validate_checksums(self) -> bool:
        return self.config.auto_validate_checksums

    @property
    def default_max_transaction_fee(self) -> Optional[int]:
        return self.config.default_max_transaction_fee

    @property
    def default_transaction_valid_duration(self) -> Optional[int]:
        return self.config.default_transaction_valid_duration

    @property
    def operator_account_id(self) -> Optional[AccountId]:
        return self.operator.account_id if self.operator is not None else None

    @property
    def operator_public_key(self) -> Optional[PublicKey]:
        return self.operator.public_key if self.operator is not None else None

    def __repr__(self) -> str:
        return f"Client(ledger={self.ledger_id}, operator={self.operator_account_id})"


__all__ = ["Client", "ClientConfig", "Operator", "NETWORKS"]
