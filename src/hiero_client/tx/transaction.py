"""
Transaction envelope and lifecycle.

A Transaction wraps exactly one payload together with the fields common to
every transaction kind: transaction id, target nodes, fee ceiling, memo,
valid duration and retry policy. It moves one way from Mutable to Frozen:

    tx = Transaction(NodeUpdateBody(node_id=1, description="test"))
    tx.set_transaction_id(TransactionId.generate("0.0.2"))
    tx.set_node_account_ids(["0.0.3"])
    tx.freeze()
    tx.sign(private_key)
    data = tx.to_bytes()

Freezing builds one body per node and locks everything except the
signatures. A missing required payload field does not stop the freeze; it
is recorded as a construction error and raised when the transaction is
executed or scheduled.
"""

from __future__ import annotations
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from ..codec.hashes import sha384_bytes
from ..codec.transaction_codec import BodyFields, TransactionCodec
from ..keys.key import Key, PrivateKey, PublicKey
from ..runtime.entity_id import AccountId, EntityId
from ..runtime.errors import (
    ConstructionError,
    DecodeError,
    ErrorCode,
    FreezeStateError,
    ValidationError,
)
from ..runtime.ledger import LedgerId
from ..runtime.transaction_id import TransactionId
from ..signers.signature_map import SignatureMap
from .builders.base import TransactionPayload
from .builders.registry import payload_for_discriminator
from .builders.schedule import ScheduleCreateBody
from .execute import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MIN_BACKOFF,
    RetryPolicy,
    SubmissionRequest,
    TransactionResponse,
    submit,
)
from .schedule import SchedulableBody, to_schedulable

if TYPE_CHECKING:
    from ..client import Client

logger = logging.getLogger(__name__)


DEFAULT_MAX_TRANSACTION_FEE = 200_000_000  # 2 hbar in tinybars
DEFAULT_VALID_DURATION = 120  # seconds
MAX_MEMO_BYTES = 100


class Transaction:
    """
    Transaction envelope.

    Holds the common fields, the payload and, once frozen, one body and one
    SignatureMap per node. Not thread safe; a transaction has a single owner.
    """

    def __init__(self, payload: TransactionPayload, client: Optional[Client] = None):
        """
        Create a mutable transaction around a payload.

        Args:
            payload: The transaction kind and its fields
            client: Optional client; when it enables checksum validation every
                entity id set on this transaction is checked against its ledger

        Raises:
            ValidationError: If payload is not a TransactionPayload or an entity
                id fails checksum validation
        """
        if not isinstance(payload, TransactionPayload):
            raise ValidationError(f"Transaction payload must be a TransactionPayload, got {type(payload).__name__}")
        if payload.is_frozen:
            raise FreezeStateError("payload already belongs to a frozen transaction")

        self._payload = payload
        self._frozen = False
        self._client: Optional[Client] = None

        self._transaction_id: Optional[TransactionId] = None
        self._node_account_ids: List[AccountId] = []
        self._max_transaction_fee: Optional[int] = None
        self._memo = ""
        self._valid_duration: Optional[int] = None

        self._max_attempts: Optional[int] = None
        self._min_backoff: Optional[float] = None
        self._max_backoff: Optional[float] = None
        self._regenerate_transaction_id: Optional[bool] = None

        self._construction_error: Optional[ConstructionError] = None
        self._body_bytes: List[bytes] = []
        self._signatures: List[SignatureMap] = []

        if client is not None:
            self._bind_client(client)

    # Lifecycle state

    @property
    def payload(self) -> TransactionPayload:
        return self._payload

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def construction_error(self) -> Optional[ConstructionError]:
        """Error recorded at freeze time for missing required payload fields."""
        return self._construction_error

    def _require_not_frozen(self) -> None:
        if self._frozen:
            raise FreezeStateError()

    def _require_frozen(self) -> None:
        if not self._frozen:
            raise FreezeStateError("transaction must be frozen before it can be signed",
                                   ErrorCode.TRANSACTION_NOT_FROZEN)

    # Checksum validation

    def _entity_ids(self, transaction_id: Optional[TransactionId] = None,
                    node_account_ids: Optional[Iterable[AccountId]] = None) -> List[EntityId]:
        transaction_id = transaction_id if transaction_id is not None else self._transaction_id
        node_account_ids = node_account_ids if node_account_ids is not None else self._node_account_ids
        ids: List[EntityId] = []
        if transaction_id is not None:
            ids.append(transaction_id.account_id)
        ids.extend(node_account_ids)
        ids.extend(self._payload.entity_ids())
        return ids

    @staticmethod
    def _check_entities(entity_ids: Iterable[EntityId], client: Optional[Client]) -> None:
        if client is None or not client.auto_validate_checksums:
            return
        for entity_id in entity_ids:
            entity_id.validate_checksum(client.ledger_id)

    def _validate_entity(self, entity_id: EntityId) -> None:
        self._check_entities([entity_id], self._client)

    def _bind_client(self, client: Client) -> None:
        self._check_entities(self._entity_ids(), client)
        self._client = client
        self._payload._bind_entity_validator(self._validate_entity)

    def validate_checksums(self, ledger_id: LedgerId) -> None:
        """
        Check every entity id on this transaction against ledger_id.

        Raises:
            ChecksumError: On the first id whose checksum does not match
        """
        for entity_id in self._entity_ids():
            entity_id.validate_checksum(ledger_id)

    # Common field setters

    def set_transaction_id(self, transaction_id: Union[TransactionId, str]) -> Transaction:
        """Set the transaction id (payer account and valid start)."""
        self._require_not_frozen()
        if isinstance(transaction_id, str):
            transaction_id = TransactionId.from_string(transaction_id)
        if not isinstance(transaction_id, TransactionId):
            raise ValidationError(f"Expected TransactionId, got {type(transaction_id).__name__}")
        self._validate_entity(transaction_id.account_id)
        self._transaction_id = transaction_id
        return self

    def set_node_account_ids(self, node_account_ids: Iterable[Union[AccountId, str, int]]) -> Transaction:
        """
        Set the nodes this transaction may be submitted to.

        Raises:
            ValidationError: If the list is empty or contains duplicates
        """
        self._require_not_frozen()
        nodes = [AccountId.coerce(node) for node in node_account_ids]
        if not nodes:
            raise ValidationError("Node account id list cannot be empty")
        if len(set(nodes)) != len(nodes):
            raise ValidationError("Node account id list contains duplicates")
        for node in nodes:
            self._validate_entity(node)
        self._node_account_ids = nodes
        return self

    def set_max_transaction_fee(self, tinybars: int) -> Transaction:
        """Set the maximum fee the payer is willing to pay, in tinybars."""
        self._require_not_frozen()
        if not isinstance(tinybars, int) or isinstance(tinybars, bool) or tinybars < 0:
            raise ValidationError(f"Transaction fee must be a non-negative integer, got {tinybars!r}")
        self._max_transaction_fee = tinybars
        return self

    def set_transaction_memo(self, memo: str) -> Transaction:
        """
        Set the transaction memo.

        Raises:
            ValidationError: If the memo exceeds 100 UTF-8 bytes
        """
        self._require_not_frozen()
        if not isinstance(memo, str):
            raise ValidationError(f"Memo must be a string, got {type(memo).__name__}")
        if len(memo.encode("utf-8")) > MAX_MEMO_BYTES:
            raise ValidationError(f"Memo must not exceed {MAX_MEMO_BYTES} bytes", ErrorCode.MEMO_TOO_LONG)
        self._memo = memo
        return self

    def set_transaction_valid_duration(self, duration: Union[int, timedelta]) -> Transaction:
        """Set how long after its valid start the transaction may be submitted."""
        self._require_not_frozen()
        seconds = int(duration.total_seconds()) if isinstance(duration, timedelta) else duration
        if not isinstance(seconds, int) or isinstance(seconds, bool) or seconds <= 0:
            raise ValidationError(f"Valid duration must be a positive number of seconds, got {duration!r}")
        self._valid_duration = seconds
        return self

    def set_max_attempts(self, max_attempts: int) -> Transaction:
        self._require_not_frozen()
        if not isinstance(max_attempts, int) or isinstance(max_attempts, bool) or max_attempts < 1:
            raise ValidationError(f"max_attempts must be at least 1, got {max_attempts!r}")
        self._max_attempts = max_attempts
        return self

    def set_min_backoff(self, seconds: float) -> Transaction:
        self._require_not_frozen()
        if seconds < 0 or seconds > self.retry_policy.max_backoff:
            raise ValidationError(f"min_backoff must be between 0 and max_backoff, got {seconds!r}")
        self._min_backoff = seconds
        return self

    def set_max_backoff(self, seconds: float) -> Transaction:
        self._require_not_frozen()
        if seconds < self.retry_policy.min_backoff:
            raise ValidationError(f"max_backoff must not be below min_backoff, got {seconds!r}")
        self._max_backoff = seconds
        return self

    def set_regenerate_transaction_id(self, regenerate: bool) -> Transaction:
        self._require_not_frozen()
        self._regenerate_transaction_id = bool(regenerate)
        return self

    # Common field accessors

    @property
    def transaction_id(self) -> Optional[TransactionId]:
        return self._transaction_id

    @property
    def node_account_ids(self) -> Tuple[AccountId, ...]:
        return tuple(self._node_account_ids)

    @property
    def max_transaction_fee(self) -> Optional[int]:
        """Fee ceiling in tinybars; locked to the resolved default at freeze."""
        return self._max_transaction_fee

    @property
    def transaction_memo(self) -> str:
        return self._memo

    @property
    def transaction_valid_duration(self) -> Optional[int]:
        return self._valid_duration

    @property
    def retry_policy(self) -> RetryPolicy:
        config = self._client.config if self._client is not None else None

        def pick(own, configured, default):
            if own is not None:
                return own
            return configured if configured is not None else default

        return RetryPolicy(
            max_attempts=pick(self._max_attempts, config.max_attempts if config else None, DEFAULT_MAX_ATTEMPTS),
            min_backoff=pick(self._min_backoff, config.min_backoff if config else None, DEFAULT_MIN_BACKOFF),
            max_backoff=pick(self._max_backoff, config.max_backoff if config else None, DEFAULT_MAX_BACKOFF),
            regenerate_transaction_id=pick(self._regenerate_transaction_id, None, True),
        )

    # Freeze

    def freeze(self) -> Transaction:
        """
        Validate and lock the transaction.

        Idempotent: freezing a frozen transaction returns it unchanged. No
        transaction id or node list is synthesized here.

        Raises:
            ValidationError: If the transaction id or node list is unset; the
                transaction stays mutable
        """
        return self._freeze(self._client, fill_from_client=False)

    def freeze_with(self, client: Client) -> Transaction:
        """
        Fill unset common fields from client, bind it, and freeze.

        The transaction id is generated for the client operator, the node list
        taken from the client network and the fee from the client default.
        """
        return self._freeze(client, fill_from_client=True)

    def _freeze(self, client: Optional[Client], fill_from_client: bool) -> Transaction:
        if self._frozen:
            return self

        transaction_id = self._transaction_id
        nodes = list(self._node_account_ids)
        if fill_from_client and client is not None:
            if transaction_id is None and client.operator_account_id is not None:
                transaction_id = TransactionId.generate(client.operator_account_id)
            if not nodes:
                nodes = list(client.network)

        if transaction_id is None:
            raise ValidationError("Transaction id must be set before freezing (set it or freeze with an operator)")
        if not nodes:
            raise ValidationError("Node account ids must be set before freezing")

        if fill_from_client and client is not None:
            self._check_entities(self._entity_ids(transaction_id, nodes), client)

        fee = self._max_transaction_fee
        if fee is None:
            fee = client.default_max_transaction_fee if client is not None else None
        if fee is None:
            fee = DEFAULT_MAX_TRANSACTION_FEE

        duration = self._valid_duration
        if duration is None:
            duration = client.default_transaction_valid_duration if client is not None else None
        if duration is None:
            duration = DEFAULT_VALID_DURATION

        missing = self._payload.required_fields_unset()
        payload_bytes = self._encode_payload()
        bodies = [
            TransactionCodec.encode_body(
                transaction_id, node, fee, duration, self._memo,
                self._payload.payload_discriminator, payload_bytes,
            )
            for node in nodes
        ]

        if fill_from_client and client is not None and self._client is not client:
            self._client = client
            self._payload._bind_entity_validator(self._validate_entity)

        self._transaction_id = transaction_id
        self._node_account_ids = nodes
        self._max_transaction_fee = fee
        self._valid_duration = duration
        self._body_bytes = bodies
        self._signatures = [SignatureMap() for _ in bodies]
        if missing:
            self._construction_error = ConstructionError(
                f"{self._payload.payload_name} is missing required fields: {', '.join(sorted(missing))}",
                missing,
            )
            logger.debug(f"Recorded construction error on {transaction_id}: missing {sorted(missing)}")
        self._payload._freeze()
        self._frozen = True

        logger.debug(f"Froze {self._payload.payload_name} {transaction_id} for {len(nodes)} node(s)")
        return self

    def _encode_payload(self) -> bytes:
        try:
            return self._payload.encode_body()
        except (ValueError, TypeError, AttributeError) as e:
            raise ValidationError(f"Cannot encode {self._payload.payload_name}: {e}",
                                  ErrorCode.MARSHAL_ERROR, cause=e) from e

    # Signatures

    def get_body_bytes(self) -> Dict[AccountId, bytes]:
        """The signable bytes of each node body."""
        self._require_frozen()
        return dict(zip(self._node_account_ids, self._body_bytes))

    def add_signature(self, key: Key, signature: Union[bytes, Mapping[PublicKey, bytes]]) -> Transaction:
        """
        Attach a signature produced elsewhere.

        Only valid for a transaction with exactly one node, since a signature
        covers one body. A KeyList takes a mapping of member key to signature.
        Adding a second signature for the same key replaces the first.

        Raises:
            FreezeStateError: If the transaction is not frozen
            ValidationError: If the transaction has more than one node body
        """
        self._require_frozen()
        if len(self._body_bytes) != 1:
            raise ValidationError(
                f"Cannot add a single signature to a transaction with {len(self._body_bytes)} node bodies; "
                f"use add_signature_for_node")
        self._signatures[0].add_for_key(key, signature)
        return self

    def add_signature_for_node(self, node_account_id: Union[AccountId, str], key: Key,
                               signature: Union[bytes, Mapping[PublicKey, bytes]]) -> Transaction:
        """Attach a signature for the body addressed to one node."""
        self._require_frozen()
        node = AccountId.coerce(node_account_id)
        try:
            index = self._node_account_ids.index(node)
        except ValueError:
            raise ValidationError(f"Transaction has no body for node {node}") from None
        self._signatures[index].add_for_key(key, signature)
        return self

    def sign(self, private_key: PrivateKey) -> Transaction:
        """Sign every node body with private_key."""
        return self.sign_with(private_key.public_key(), private_key.sign)

    def sign_with(self, public_key: PublicKey, signer: Callable[[bytes], bytes]) -> Transaction:
        """
        Sign every node body with an external signer.

        Args:
            public_key: Key the signer signs for
            signer: Callable mapping body bytes to signature bytes
        """
        self._require_frozen()
        signatures = [signer(body) for body in self._body_bytes]
        for signature in signatures:
            SignatureMap.check_pair(public_key, signature)
        for sig_map, signature in zip(self._signatures, signatures):
            sig_map.add(public_key, signature)
        return self

    def sign_with_operator(self, client: Client) -> Transaction:
        """Freeze with client if needed and sign with its operator key."""
        operator = client.operator
        if operator is None:
            raise ValidationError("Client has no operator to sign with")
        if not self._frozen:
            self.freeze_with(client)
        return self.sign(operator.private_key)

    def is_signed_by(self, public_key: PublicKey) -> bool:
        return bool(self._signatures) and all(public_key in sig_map for sig_map in self._signatures)

    def get_signatures(self) -> Dict[AccountId, Dict[PublicKey, bytes]]:
        """Signatures per node, each in insertion order."""
        return {
            node: sig_map.to_dict()
            for node, sig_map in zip(self._node_account_ids, self._signatures)
        }

    @property
    def has_signatures(self) -> bool:
        return any(self._signatures)

    # Serialization

    def _signed_transaction_bytes(self, index: int) -> bytes:
        return TransactionCodec.encode_signed_transaction(self._body_bytes[index], self._signatures[index])

    def _transaction_messages(self) -> List[bytes]:
        if self._frozen:
            return [
                TransactionCodec.encode_transaction(self._signed_transaction_bytes(index))
                for index in range(len(self._body_bytes))
            ]

        payload_bytes = self._encode_payload()
        nodes: List[Optional[AccountId]] = list(self._node_account_ids) or [None]
        return [
            TransactionCodec.encode_transaction(
                TransactionCodec.encode_signed_transaction(
                    TransactionCodec.encode_body(
                        self._transaction_id, node, self._max_transaction_fee or 0, self._valid_duration,
                        self._memo, self._payload.payload_discriminator, payload_bytes,
                    ),
                    SignatureMap(),
                )
            )
            for node in nodes
        ]

    def to_bytes(self) -> bytes:
        """
        Encode as a TransactionList with one entry per node body.

        A mutable transaction encodes unsigned, with whatever common fields
        are set.
        """
        return TransactionCodec.encode_transaction_list(self._transaction_messages())

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        """
        Decode a TransactionList produced by to_bytes or another client.

        The result is frozen, keeping the original body bytes and signatures,
        when the bodies carry a transaction id and node; otherwise it is
        mutable.

        Raises:
            DecodeError: If the bytes are malformed, the payload kind is
                unknown, or the bodies disagree with each other
        """
        entries = []
        for message in TransactionCodec.decode_transaction_list(data):
            signed = TransactionCodec.decode_signed_transaction(TransactionCodec.decode_transaction(message))
            entries.append((signed.body_bytes, signed.sig_map, TransactionCodec.decode_body(signed.body_bytes)))

        first = entries[0][2]
        for _, _, body in entries[1:]:
            _check_same_transaction(first, body)

        nodes = [body.node_account_id for _, _, body in entries]
        present = [node for node in nodes if node is not None]
        if present and len(present) != len(nodes):
            raise DecodeError("Some transaction bodies are missing their node account id")
        if len(set(present)) != len(present):
            raise DecodeError("Transaction list addresses the same node twice")

        payload_cls = payload_for_discriminator(first.data_field)
        logger.debug(f"Decoding {payload_cls.__name__} from {len(entries)} body(ies)")
        payload = payload_cls.decode_body(first.data)

        tx = cls(payload)
        tx._transaction_id = first.transaction_id
        tx._node_account_ids = present
        tx._memo = first.memo
        tx._valid_duration = first.valid_duration

        if first.transaction_id is not None and present:
            tx._max_transaction_fee = first.transaction_fee
            tx._body_bytes = [body_bytes for body_bytes, _, _ in entries]
            tx._signatures = [sig_map for _, sig_map, _ in entries]
            missing = payload.required_fields_unset()
            if missing:
                tx._construction_error = ConstructionError(
                    f"{payload.payload_name} is missing required fields: {', '.join(sorted(missing))}",
                    missing,
                )
            payload._freeze()
            tx._frozen = True
        else:
            if any(sig_map for _, sig_map, _ in entries):
                raise DecodeError("Signed transaction is missing its transaction id or node account id")
            tx._max_transaction_fee = first.transaction_fee or None
        return tx

    def get_transaction_hash(self) -> bytes:
        """SHA-384 of the signed transaction bytes of the first node body."""
        self._require_frozen()
        return sha384_bytes(self._signed_transaction_bytes(0))

    def get_transaction_hash_per_node(self) -> Dict[AccountId, bytes]:
        self._require_frozen()
        return {
            node: sha384_bytes(self._signed_transaction_bytes(index))
            for index, node in enumerate(self._node_account_ids)
        }

    # Scheduling

    def to_schedulable(self) -> SchedulableBody:
        """Reduce this transaction to a schedulable body."""
        return to_schedulable(self)

    def schedule(self) -> Transaction:
        """
        Wrap this transaction in a new, mutable schedule-create transaction.

        Raises:
            ValidationError: If this transaction already carries signatures
            IncompleteTransactionError: If a required payload field is missing
        """
        if self.has_signatures:
            raise ValidationError("A transaction that already has signatures cannot be scheduled; "
                                  "add the signatures to the schedule instead")
        body = self.to_schedulable()
        return Transaction(ScheduleCreateBody(scheduled_transaction_body=body), client=self._client)

    # Execution

    def execute(self, client: Client) -> TransactionResponse:
        """
        Hand the transaction to the client's submitter.

        Freezes with client if still mutable, raises the recorded construction
        error if there is one, validates checksums when the client asks for it
        and signs with the operator key if it has not signed yet.

        Raises:
            ConstructionError: If a required payload field was missing at freeze
            ChecksumError: If an entity id does not belong to the client's ledger
            ExecuteError: If there is no submitter or submission fails
        """
        if not self._frozen:
            self.freeze_with(client)
        if self._construction_error is not None:
            raise self._construction_error
        if client.auto_validate_checksums:
            self.validate_checksums(client.ledger_id)

        operator = client.operator
        if operator is not None and not self.is_signed_by(operator.public_key):
            self.sign(operator.private_key)

        request = SubmissionRequest(
            transaction_id=self._transaction_id,
            node_account_ids=tuple(self._node_account_ids),
            transactions=tuple(self._transaction_messages()),
            transaction_hashes=tuple(
                sha384_bytes(self._signed_transaction_bytes(index)) for index in range(len(self._body_bytes))
            ),
            service=self._payload.target_service_endpoint(),
            retry_policy=self.retry_policy,
        )
        return submit(client, request)

    def __repr__(self) -> str:
        state = "Frozen" if self._frozen else "Mutable"
        return f"Transaction({self._payload!r}, id={self._transaction_id}, state={state})"


def _check_same_transaction(first: BodyFields, other: BodyFields) -> None:
    if other.transaction_id != first.transaction_id:
        raise DecodeError("Transaction bodies disagree on the transaction id")
    if (other.transaction_fee, other.valid_duration, other.memo) != (
            first.transaction_fee, first.valid_duration, first.memo):
        raise DecodeError("Transaction bodies disagree on their common fields")
    if other.data_field != first.data_field or other.data != first.data:
        raise DecodeError("Transaction bodies carry different payloads")


transaction_from_bytes = Transaction.from_bytes


__all__ = [
    "Transaction",
    "transaction_from_bytes",
    "DEFAULT_MAX_TRANSACTION_FEE",
    "DEFAULT_VALID_DURATION",
    "MAX_MEMO_BYTES",
]
