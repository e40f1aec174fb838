"""
Schedule create payload.
"""

from __future__ import annotations
from typing import List, Optional, Union

from ...codec.messages import (
    decode_account_id,
    decode_key,
    decode_timestamp,
    decoding,
    encode_account_id,
    encode_key,
    encode_timestamp,
)
from ...codec.reader import expect_bytes, expect_int, last_value, parse_fields
from ...codec.writer import ProtoWriter
from ...keys.key import Key
from ...runtime.entity_id import AccountId, EntityId
from ...runtime.transaction_id import Timestamp
from ..schedule import SchedulableBody
from .base import ServiceDescriptor, TransactionPayload, validate_optional
from .registry import register_payload


SCHEDULE_SERVICE = "proto.ScheduleService"


@register_payload
class ScheduleCreateBody(TransactionPayload):
    """
    Payload that creates a schedule entity wrapping another transaction.

    The wrapped transaction is carried as a SchedulableBody and executes once
    the required signatures have been collected on the schedule.
    """

    payload_discriminator = 42
    required_fields = ('scheduled_transaction_body',)

    def __init__(
        self,
        scheduled_transaction_body: Optional[SchedulableBody] = None,
        memo: Optional[str] = None,
        admin_key: Optional[Key] = None,
        payer_account_id: Union[AccountId, str, None] = None,
        expiration_time: Optional[Timestamp] = None,
        wait_for_expiry: bool = False,
    ):
        super().__init__()
        self.scheduled_transaction_body = validate_optional(
            "scheduled_transaction_body", scheduled_transaction_body, SchedulableBody)
        self.memo = validate_optional("memo", memo, str)
        self.admin_key = validate_optional("admin_key", admin_key, Key)
        self.payer_account_id: Optional[AccountId] = (
            AccountId.coerce(payer_account_id) if payer_account_id is not None else None)
        self.expiration_time = validate_optional("expiration_time", expiration_time, Timestamp)
        self.wait_for_expiry = validate_optional("wait_for_expiry", wait_for_expiry, bool)

    def set_scheduled_transaction_body(self, body: Optional[SchedulableBody]) -> ScheduleCreateBody:
        """Set the transaction to schedule."""
        body = validate_optional('scheduled_transaction_body', body, SchedulableBody)
        return self._set('scheduled_transaction_body', body)

    def set_schedule_memo(self, memo: Optional[str]) -> ScheduleCreateBody:
        """Set the memo of the schedule entity."""
        return self._set('memo', validate_optional('memo', memo, str))

    def set_admin_key(self, admin_key: Optional[Key]) -> ScheduleCreateBody:
        """Set the key that can delete the schedule."""
        return self._set('admin_key', validate_optional('admin_key', admin_key, Key))

    def set_payer_account_id(self, account_id: Union[AccountId, str, None]) -> ScheduleCreateBody:
        """Set the account that pays for the scheduled transaction."""
        return self._set_entity('payer_account_id', account_id, AccountId)

    def set_expiration_time(self, expiration_time: Optional[Timestamp]) -> ScheduleCreateBody:
        return self._set('expiration_time', validate_optional('expiration_time', expiration_time, Timestamp))

    def set_wait_for_expiry(self, wait_for_expiry: bool) -> ScheduleCreateBody:
        return self._set('wait_for_expiry', validate_optional('wait_for_expiry', wait_for_expiry, bool))

    def entity_ids(self) -> List[EntityId]:
        ids: List[EntityId] = []
        if self.payer_account_id is not None:
            ids.append(self.payer_account_id)
        if self.scheduled_transaction_body is not None:
            ids.extend(self.scheduled_transaction_body.payload.entity_ids())
        return ids

    def encode_body(self) -> bytes:
        w = ProtoWriter()
        if self.scheduled_transaction_body is not None:
            w.message_field(1, self.scheduled_transaction_body.to_bytes())
        w.string_field(2, self.memo)
        if self.admin_key is not None:
            w.message_field(3, encode_key(self.admin_key))
        if self.payer_account_id is not None:
            w.message_field(4, encode_account_id(self.payer_account_id))
        if self.expiration_time is not None:
            w.message_field(5, encode_timestamp(self.expiration_time))
        w.bool_field(13, self.wait_for_expiry)
        return w.to_bytes()

    @classmethod
    def decode_body(cls, data: bytes) -> ScheduleCreateBody:
        fields = parse_fields(data)
        scheduled = last_value(fields, 1)
        memo = last_value(fields, 2)
        admin_key = last_value(fields, 3)
        payer = last_value(fields, 4)
        expiration = last_value(fields, 5)
        with decoding("schedule create body"):
            return cls(
                scheduled_transaction_body=(
                    SchedulableBody.from_bytes(expect_bytes(scheduled, "scheduledTransactionBody"))
                    if scheduled is not None else None),
                memo=expect_bytes(memo, "memo").decode("utf-8") if memo is not None else None,
                admin_key=decode_key(expect_bytes(admin_key, "adminKey")) if admin_key is not None else None,
                payer_account_id=(
                    decode_account_id(expect_bytes(payer, "payerAccountID")) if payer is not None else None),
                expiration_time=(
                    decode_timestamp(expect_bytes(expiration, "expiration_time")) if expiration is not None else None),
                wait_for_expiry=bool(expect_int(last_value(fields, 13, 0), "wait_for_expiry")),
            )

    def target_service_endpoint(self) -> ServiceDescriptor:
        return ServiceDescriptor(SCHEDULE_SERVICE, "createSchedule")

    def __repr__(self) -> str:
        return f"ScheduleCreateBody({self.scheduled_transaction_body!r})"


__all__ = ["ScheduleCreateBody", "SCHEDULE_SERVICE"]
