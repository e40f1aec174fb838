"""
Transaction serialization tests: TransactionList encoding, decoding back to
an equivalent transaction, and transaction hashes.
"""

import hashlib

import pytest

from hiero_client.codec.transaction_codec import TransactionCodec
from hiero_client.runtime.entity_id import AccountId
from hiero_client.runtime.errors import ConstructionError, DecodeError, ErrorCode, FreezeStateError
from hiero_client.signers.signature_map import SignatureMap
from hiero_client.tx.builders import NodeCreateBody, NodeUpdateBody
from hiero_client.tx.transaction import Transaction, transaction_from_bytes

from helpers.factories import (
    mk_ecdsa_key,
    mk_ed25519_keypair,
    mk_endpoint,
    mk_frozen_transaction,
    mk_node_create,
    mk_node_update,
    mk_transaction_id,
)


def _entries(data):
    """Decode a TransactionList into (body fields, signature map) pairs."""
    result = []
    for message in TransactionCodec.decode_transaction_list(data):
        signed = TransactionCodec.decode_signed_transaction(TransactionCodec.decode_transaction(message))
        result.append((TransactionCodec.decode_body(signed.body_bytes), signed.sig_map))
    return result


class TestNodeUpdateScenario:
    """Node update with id, description, gossip endpoint and admin key."""

    def test_node_update_roundtrip(self):
        _, admin_key = mk_ed25519_keypair(42)
        payload = NodeUpdateBody(
            node_id=1,
            description="test",
            gossip_endpoints=[mk_endpoint()],
            admin_key=admin_key,
        )
        tx = mk_frozen_transaction(payload)
        decoded = Transaction.from_bytes(tx.to_bytes())

        assert isinstance(decoded.payload, NodeUpdateBody)
        assert decoded.payload.node_id == 1
        assert decoded.payload.description == "test"
        assert decoded.payload.gossip_endpoints == (mk_endpoint(),)
        assert decoded.payload.admin_key == admin_key

    def test_missing_node_id_cannot_be_scheduled(self):
        _, admin_key = mk_ed25519_keypair(42)
        payload = NodeUpdateBody(description="test", gossip_endpoints=[mk_endpoint()], admin_key=admin_key)
        tx = mk_frozen_transaction(payload)
        with pytest.raises(ConstructionError):
            tx.to_schedulable()

    def test_missing_node_id_survives_roundtrip(self):
        tx = mk_frozen_transaction(NodeUpdateBody(description="test"))
        decoded = Transaction.from_bytes(tx.to_bytes())

        assert decoded.payload.node_id is None
        assert decoded.construction_error is not None
        assert decoded.construction_error.missing_fields == frozenset({"node_id"})
        with pytest.raises(ConstructionError):
            decoded.to_schedulable()

    def test_node_zero_roundtrip(self):
        decoded = Transaction.from_bytes(mk_frozen_transaction(mk_node_update(node_id=0)).to_bytes())
        assert decoded.payload.node_id == 0
        assert decoded.construction_error is None


class TestRoundtrip:
    """Frozen transactions decode to equivalent transactions."""

    def test_common_fields_payload_and_signatures(self):
        ed_key = mk_ed25519_keypair(1)[0]
        ecdsa_key = mk_ecdsa_key(2)
        tx = Transaction(mk_node_create())
        tx.set_transaction_id(mk_transaction_id())
        tx.set_node_account_ids(["0.0.3", "0.0.4"])
        tx.set_max_transaction_fee(123_456)
        tx.set_transaction_memo("hello")
        tx.set_transaction_valid_duration(60)
        tx.freeze().sign(ed_key).sign(ecdsa_key)

        decoded = Transaction.from_bytes(tx.to_bytes())

        assert decoded.is_frozen
        assert decoded.transaction_id == tx.transaction_id
        assert decoded.node_account_ids == tx.node_account_ids
        assert decoded.max_transaction_fee == 123_456
        assert decoded.transaction_memo == "hello"
        assert decoded.transaction_valid_duration == 60
        assert decoded.payload == tx.payload
        assert isinstance(decoded.payload, NodeCreateBody)
        for node in tx.node_account_ids:
            assert set(decoded.get_signatures()[node].items()) == set(tx.get_signatures()[node].items())

    def test_reencoding_is_byte_identical(self, fake_keypair):
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4")).sign(fake_keypair[0])
        data = tx.to_bytes()
        assert Transaction.from_bytes(data).to_bytes() == data
        assert transaction_from_bytes(data).to_bytes() == data

    def test_decoded_transaction_accepts_more_signatures(self, fake_keypair):
        decoded = Transaction.from_bytes(mk_frozen_transaction().to_bytes())
        decoded.sign(fake_keypair[0])
        assert decoded.is_signed_by(fake_keypair[1])

    def test_decoded_transaction_is_locked(self):
        decoded = Transaction.from_bytes(mk_frozen_transaction().to_bytes())
        with pytest.raises(FreezeStateError):
            decoded.set_transaction_memo("x")
        with pytest.raises(FreezeStateError):
            decoded.payload.set_node_id(9)

    def test_decoded_incomplete_transaction_keeps_error(self):
        tx = mk_frozen_transaction(NodeCreateBody(account_id="0.0.1001"))
        decoded = Transaction.from_bytes(tx.to_bytes())
        assert decoded.construction_error is not None
        assert decoded.construction_error.missing_fields == frozenset({"admin_key"})

    def test_one_entry_per_node(self, fake_keypair):
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4", "0.0.5")).sign(fake_keypair[0])
        entries = _entries(tx.to_bytes())
        assert [body.node_account_id for body, _ in entries] == [AccountId(0, 0, n) for n in (3, 4, 5)]
        assert all(len(sig_map) == 1 for _, sig_map in entries)


class TestMutableEncoding:
    """Unfrozen transactions serialize unsigned."""

    def test_node_less_body(self):
        tx = Transaction(mk_node_update()).set_transaction_memo("draft")
        entries = _entries(tx.to_bytes())
        assert len(entries) == 1
        body, sig_map = entries[0]
        assert body.node_account_id is None
        assert body.transaction_id is None
        assert body.memo == "draft"
        assert len(sig_map) == 0

    def test_decodes_as_mutable(self):
        tx = Transaction(mk_node_update()).set_transaction_memo("draft").set_max_transaction_fee(10)
        decoded = Transaction.from_bytes(tx.to_bytes())
        assert not decoded.is_frozen
        assert decoded.transaction_memo == "draft"
        assert decoded.max_transaction_fee == 10
        decoded.set_transaction_id(mk_transaction_id()).set_node_account_ids(["0.0.3"]).freeze()
        assert decoded.payload.node_id == 1

    def test_one_body_per_set_node(self):
        tx = Transaction(mk_node_update()).set_node_account_ids(["0.0.3", "0.0.4"])
        assert len(_entries(tx.to_bytes())) == 2


class TestDecodeErrors:
    """Malformed and inconsistent transaction lists."""

    def test_empty(self):
        with pytest.raises(DecodeError):
            Transaction.from_bytes(b"")

    def test_truncated(self):
        data = mk_frozen_transaction().to_bytes()
        with pytest.raises(DecodeError):
            Transaction.from_bytes(data[:-3])

    def test_unknown_payload_kind(self):
        body = TransactionCodec.encode_body(mk_transaction_id(), AccountId(0, 0, 3), 1, 120, "", 9999, b"")
        data = TransactionCodec.encode_transaction_list([
            TransactionCodec.encode_transaction(TransactionCodec.encode_signed_transaction(body, SignatureMap()))
        ])
        with pytest.raises(DecodeError) as exc_info:
            Transaction.from_bytes(data)
        assert exc_info.value.code == ErrorCode.UNKNOWN_TRANSACTION_BODY

    def _list_of(self, *bodies, sig_map=None):
        return TransactionCodec.encode_transaction_list([
            TransactionCodec.encode_transaction(
                TransactionCodec.encode_signed_transaction(body, sig_map or SignatureMap()))
            for body in bodies
        ])

    def test_bodies_disagree(self):
        payload = mk_node_update().encode_body()
        a = TransactionCodec.encode_body(mk_transaction_id(), AccountId(0, 0, 3), 1, 120, "a", 55, payload)
        b = TransactionCodec.encode_body(mk_transaction_id(), AccountId(0, 0, 4), 1, 120, "b", 55, payload)
        with pytest.raises(DecodeError):
            Transaction.from_bytes(self._list_of(a, b))

    def test_duplicate_node(self):
        payload = mk_node_update().encode_body()
        a = TransactionCodec.encode_body(mk_transaction_id(), AccountId(0, 0, 3), 1, 120, "", 55, payload)
        with pytest.raises(DecodeError):
            Transaction.from_bytes(self._list_of(a, a))

    def test_signed_body_without_transaction_id(self, fake_keypair):
        private_key, public_key = fake_keypair
        body = TransactionCodec.encode_body(None, None, 0, None, "", 55, mk_node_update().encode_body())
        sig_map = SignatureMap({public_key: private_key.sign(body)})
        with pytest.raises(DecodeError):
            Transaction.from_bytes(self._list_of(body, sig_map=sig_map))


class TestTransactionHash:

    def test_hash_is_sha384_of_signed_transaction(self, fake_keypair):
        tx = mk_frozen_transaction().sign(fake_keypair[0])
        message = TransactionCodec.decode_transaction_list(tx.to_bytes())[0]
        signed = TransactionCodec.decode_transaction(message)
        assert tx.get_transaction_hash() == hashlib.sha384(signed).digest()

    def test_hash_changes_with_signatures(self, fake_keypair):
        tx = mk_frozen_transaction()
        unsigned = tx.get_transaction_hash()
        tx.sign(fake_keypair[0])
        assert tx.get_transaction_hash() != unsigned

    def test_hash_per_node(self):
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4"))
        hashes = tx.get_transaction_hash_per_node()
        assert list(hashes) == [AccountId(0, 0, 3), AccountId(0, 0, 4)]
        assert hashes[AccountId(0, 0, 3)] == tx.get_transaction_hash()
        assert len(set(hashes.values())) == 2
