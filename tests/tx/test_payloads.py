"""
Payload tests: node create, update and delete, schedule create, and the
registry that dispatches on discriminators.
"""

import pytest

from hiero_client.runtime.endpoint import Endpoint
from hiero_client.runtime.entity_id import AccountId
from hiero_client.runtime.errors import DecodeError, ErrorCode, FreezeStateError, ValidationError
from hiero_client.runtime.transaction_id import Timestamp
from hiero_client.tx.builders import (
    NodeCreateBody,
    NodeDeleteBody,
    NodeUpdateBody,
    ScheduleCreateBody,
    list_payload_types,
    payload_for_discriminator,
    payload_for_schedulable_discriminator,
    register_payload,
)
from hiero_client.tx.schedule import SchedulableBody

from helpers.factories import mk_endpoint, mk_node_create, mk_node_delete, mk_node_update


class TestRegistry:
    """Discriminator dispatch."""

    def test_registered_payloads(self, payload_registry):
        assert payload_registry[54] is NodeCreateBody
        assert payload_registry[55] is NodeUpdateBody
        assert payload_registry[56] is NodeDeleteBody
        assert payload_registry[42] is ScheduleCreateBody

    def test_schedulable_discriminators(self):
        assert payload_for_schedulable_discriminator(42) is NodeCreateBody
        assert payload_for_schedulable_discriminator(43) is NodeUpdateBody
        assert payload_for_schedulable_discriminator(44) is NodeDeleteBody

    def test_unknown_discriminator(self):
        with pytest.raises(DecodeError) as exc_info:
            payload_for_discriminator(9999)
        assert exc_info.value.code == ErrorCode.UNKNOWN_TRANSACTION_BODY
        with pytest.raises(DecodeError):
            payload_for_schedulable_discriminator(9999)

    def test_list_payload_types_sorted(self):
        names = list_payload_types()
        assert names.index("ScheduleCreateBody") < names.index("NodeCreateBody") < names.index("NodeDeleteBody")

    def test_duplicate_registration(self):
        class Clash(NodeDeleteBody):
            payload_discriminator = 56
            schedulable_discriminator = None

        with pytest.raises(ValueError):
            register_payload(Clash)

    def test_reregistering_same_class_is_harmless(self):
        assert register_payload(NodeDeleteBody) is NodeDeleteBody


class TestNodePayloads:
    """Field handling and encoding of the address book payloads."""

    def test_node_create_roundtrip(self):
        payload = mk_node_create()
        payload.set_decline_reward(True)
        payload.set_grpc_web_proxy_endpoint(Endpoint.for_domain("proxy.example.com", 443))
        decoded = NodeCreateBody.decode_body(payload.encode_body())

        assert decoded == payload
        assert decoded.account_id == AccountId(0, 0, 1001)
        assert decoded.gossip_endpoints == payload.gossip_endpoints
        assert decoded.admin_key == payload.admin_key
        assert decoded.decline_reward is True

    def test_node_update_wrapper_values(self):
        payload = NodeUpdateBody(node_id=3, description="", gossip_ca_certificate=b"")
        decoded = NodeUpdateBody.decode_body(payload.encode_body())
        assert decoded.description == ""
        assert decoded.gossip_ca_certificate == b""
        assert decoded.grpc_certificate_hash is None
        assert decoded.decline_reward is None

    def test_node_update_setters_chain(self):
        payload = (NodeUpdateBody()
                   .set_node_id(7)
                   .set_description("renamed")
                   .add_service_endpoint(mk_endpoint(1))
                   .add_service_endpoint(mk_endpoint(2))
                   .set_decline_reward(False))
        decoded = NodeUpdateBody.decode_body(payload.encode_body())
        assert decoded.node_id == 7
        assert [e.port for e in decoded.service_endpoints] == [1, 2]
        assert decoded.decline_reward is False

    def test_node_id_presence_survives_encoding(self):
        assert NodeUpdateBody.decode_body(b"").node_id is None
        assert NodeDeleteBody.decode_body(b"").node_id is None
        assert NodeDeleteBody(node_id=0).encode_body() == b"\x08\x00"
        assert NodeUpdateBody.decode_body(NodeUpdateBody(node_id=0).encode_body()).node_id == 0
        assert NodeDeleteBody.decode_body(NodeDeleteBody(node_id=0).encode_body()).node_id == 0

    @pytest.mark.parametrize("setter, value", [
        ("set_description", 123),
        ("set_gossip_endpoints", ["10.0.0.1:50211"]),
        ("set_gossip_endpoints", "10.0.0.1:50211"),
        ("add_service_endpoint", ("10.0.0.1", 50211)),
        ("set_gossip_ca_certificate", "-----BEGIN CERTIFICATE-----"),
        ("set_grpc_certificate_hash", 42),
        ("set_admin_key", b"\x01" * 32),
        ("set_decline_reward", 1),
        ("set_grpc_web_proxy_endpoint", "proxy.example.com:443"),
    ])
    def test_setters_reject_wrong_types(self, setter, value):
        payload = mk_node_update(service_endpoints=[mk_endpoint()])
        before = payload.encode_body()
        with pytest.raises(ValidationError):
            getattr(payload, setter)(value)
        assert payload.encode_body() == before

    def test_constructor_rejects_wrong_types(self):
        with pytest.raises(ValidationError):
            NodeCreateBody(description=5)
        with pytest.raises(ValidationError):
            NodeUpdateBody(node_id=1, gossip_endpoints=[None])

    def test_bytearray_certificate_is_copied(self):
        certificate = bytearray(b"\x30\x82")
        payload = mk_node_update().set_gossip_ca_certificate(certificate)
        certificate[0] = 0
        assert payload.gossip_ca_certificate == b"\x30\x82"

    @pytest.mark.parametrize("bad", [-1, "1", True])
    def test_invalid_node_id(self, bad):
        with pytest.raises(ValidationError):
            NodeDeleteBody(node_id=bad)

    def test_required_fields(self):
        assert NodeUpdateBody(description="x").required_fields_unset() == {"node_id"}
        assert NodeCreateBody().required_fields_unset() == {"account_id", "admin_key"}
        assert mk_node_create().required_fields_unset() == set()
        assert mk_node_delete().required_fields_unset() == set()

    def test_service_endpoints(self):
        assert NodeCreateBody().target_service_endpoint().path == "/proto.AddressBookService/createNode"
        assert str(mk_node_update().target_service_endpoint()) == "proto.AddressBookService/updateNode"
        assert mk_node_delete().target_service_endpoint().method == "deleteNode"

    def test_entity_ids(self):
        assert mk_node_create().entity_ids() == [AccountId(0, 0, 1001)]
        assert mk_node_update().entity_ids() == []

    def test_frozen_payload_rejects_mutation(self):
        payload = mk_node_update()
        payload._freeze()
        with pytest.raises(FreezeStateError):
            payload.set_description("changed")
        with pytest.raises(FreezeStateError):
            payload.description = "changed"
        assert payload.description == "test node"

    def test_malformed_payload_bytes(self):
        with pytest.raises(DecodeError):
            NodeUpdateBody.decode_body(b"\x1a\x05ab")
        with pytest.raises(DecodeError):
            NodeCreateBody.decode_body(b"\x0a\x01\x08")


class TestScheduleCreatePayload:

    def test_roundtrip(self):
        body = SchedulableBody(mk_node_delete(5), transaction_fee=10, memo="inner")
        payload = ScheduleCreateBody(
            scheduled_transaction_body=body,
            memo="schedule memo",
            payer_account_id="0.0.50",
            expiration_time=Timestamp(seconds=1800000000),
            wait_for_expiry=True,
        )
        decoded = ScheduleCreateBody.decode_body(payload.encode_body())

        assert decoded == payload
        assert decoded.scheduled_transaction_body == body
        assert decoded.scheduled_transaction_body.payload.node_id == 5
        assert decoded.payer_account_id == AccountId(0, 0, 50)
        assert decoded.wait_for_expiry is True

    def test_entity_ids_include_inner_payload(self):
        payload = ScheduleCreateBody(SchedulableBody(mk_node_create()), payer_account_id="0.0.50")
        assert payload.entity_ids() == [AccountId(0, 0, 50), AccountId(0, 0, 1001)]

    def test_schedule_create_cannot_be_scheduled(self):
        with pytest.raises(ValidationError):
            SchedulableBody(ScheduleCreateBody(SchedulableBody(mk_node_delete())))

    def test_rejects_wrong_types(self):
        with pytest.raises(ValidationError):
            ScheduleCreateBody(scheduled_transaction_body=mk_node_delete())
        with pytest.raises(ValidationError):
            ScheduleCreateBody().set_schedule_memo(7)
        with pytest.raises(ValidationError):
            ScheduleCreateBody().set_expiration_time(1800000000)
        with pytest.raises(ValidationError):
            ScheduleCreateBody().set_wait_for_expiry("yes")

    def test_unknown_inner_kind(self):
        with pytest.raises(DecodeError):
            SchedulableBody.from_bytes(b"\xca\x3e\x00")
