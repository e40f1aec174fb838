"""
Timestamp and transaction identifier types.

A TransactionId is the paying account plus the valid-start timestamp chosen
by the client. It is unique per submitted transaction and orders
transactions from the same payer.
"""

from __future__ import annotations
import functools
import random
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

from .entity_id import AccountId
from .errors import ValidationError


NANOS_PER_SECOND = 1_000_000_000

# Valid start is backdated by a random amount in this range (nanoseconds)
VALID_START_JITTER_NS = (8 * NANOS_PER_SECOND, 13 * NANOS_PER_SECOND)

TRANSACTION_ID_REGEX = re.compile(
    r"^(?P<account>\d+\.\d+\.\d+(?:-[a-z]+)?)@(?P<seconds>\d+)\.(?P<nanos>\d+)"
    r"(?P<scheduled>\?scheduled)?(?:/(?P<nonce>\d+))?$"
)


@functools.total_ordering
class Timestamp(BaseModel):
    """Seconds and nanoseconds since the Unix epoch."""

    seconds: int = Field(default=0, ge=0)
    nanos: int = Field(default=0, ge=0, lt=NANOS_PER_SECOND)

    model_config = {"frozen": True}

    @classmethod
    def now(cls) -> Timestamp:
        return cls.from_nanos(time.time_ns())

    @classmethod
    def from_nanos(cls, total_nanos: int) -> Timestamp:
        seconds, nanos = divmod(total_nanos, NANOS_PER_SECOND)
        return cls(seconds=seconds, nanos=nanos)

    @classmethod
    def from_datetime(cls, value: datetime) -> Timestamp:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        delta = value - epoch
        return cls.from_nanos((delta.days * 86400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * 1000)

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc) + timedelta(microseconds=self.nanos // 1000)

    def to_nanos(self) -> int:
        return self.seconds * NANOS_PER_SECOND + self.nanos

    def plus_seconds(self, seconds: int) -> Timestamp:
        return Timestamp(seconds=self.seconds + seconds, nanos=self.nanos)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return (self.seconds, self.nanos) < (other.seconds, other.nanos)

    def __str__(self) -> str:
        return f"{self.seconds}.{self.nanos:09d}"


@functools.total_ordering
class TransactionId(BaseModel):
    """
    Transaction identifier: payer account and valid start.

    Immutable and hashable. Ordering is by valid start, then payer.
    """

    account_id: AccountId
    valid_start: Timestamp
    scheduled: bool = False
    nonce: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @field_validator('valid_start', mode='before')
    @classmethod
    def parse_valid_start(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return Timestamp.from_datetime(v)
        return v

    @classmethod
    def generate(cls, account_id: Union[AccountId, str]) -> TransactionId:
        """
        New id for account_id with a valid start slightly in the past.

        The backdating absorbs clock skew between the client and the nodes.
        """
        jitter = random.randint(*VALID_START_JITTER_NS)
        valid_start = Timestamp.from_nanos(time.time_ns() - jitter)
        return cls(account_id=AccountId.coerce(account_id), valid_start=valid_start)

    @classmethod
    def with_valid_start(cls, account_id: Union[AccountId, str], valid_start: Union[Timestamp, datetime]) -> TransactionId:
        return cls(account_id=AccountId.coerce(account_id), valid_start=valid_start)

    @classmethod
    def from_string(cls, value: str) -> TransactionId:
        """
        Parse "0.0.5@1700000000.000000123", optionally followed by
        "?scheduled" and "/<nonce>".
        """
        match = TRANSACTION_ID_REGEX.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise ValidationError(f"Invalid transaction id: {value!r}")
        nanos = int(match.group("nanos"))
        if nanos >= NANOS_PER_SECOND:
            raise ValidationError(f"Invalid transaction id nanoseconds: {value!r}")
        return cls(
            account_id=AccountId.from_string(match.group("account")),
            valid_start=Timestamp(seconds=int(match.group("seconds")), nanos=nanos),
            scheduled=match.group("scheduled") is not None,
            nonce=int(match.group("nonce") or 0),
        )

    def entity_ids(self):
        return [self.account_id]

    def _key(self):
        return (self.valid_start.seconds, self.valid_start.nanos, self.account_id._key(), self.scheduled, self.nonce)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, TransactionId):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        text = f"{self.account_id}@{self.valid_start}"
        if self.scheduled:
            text += "?scheduled"
        if self.nonce:
            text += f"/{self.nonce}"
        return text


__all__ = ["Timestamp", "TransactionId", "NANOS_PER_SECOND"]
