"""
Transaction lifecycle tests: Mutable to Frozen, freeze idempotence, the
recorded construction error and signing.
"""

from datetime import timedelta

import pytest

from hiero_client.keys.key import KeyList
from hiero_client.runtime.entity_id import AccountId
from hiero_client.runtime.errors import (
    ConstructionError,
    ErrorCode,
    FreezeStateError,
    ValidationError,
)
from hiero_client.tx.builders import NodeUpdateBody
from hiero_client.tx.transaction import (
    DEFAULT_MAX_TRANSACTION_FEE,
    DEFAULT_VALID_DURATION,
    Transaction,
)

from helpers.factories import (
    mk_ecdsa_key,
    mk_ed25519_keypair,
    mk_frozen_transaction,
    mk_node_update,
    mk_transaction_id,
)


class TestCommonFields:
    """Setters on a mutable transaction."""

    def test_defaults(self):
        tx = Transaction(mk_node_update())
        assert not tx.is_frozen
        assert tx.transaction_id is None
        assert tx.node_account_ids == ()
        assert tx.max_transaction_fee is None
        assert tx.transaction_memo == ""
        assert tx.construction_error is None

    def test_setters_chain(self):
        tx = (Transaction(mk_node_update())
              .set_transaction_id("0.0.2@1700000000.000000005")
              .set_node_account_ids(["0.0.3", AccountId(0, 0, 4)])
              .set_max_transaction_fee(5)
              .set_transaction_memo("memo")
              .set_transaction_valid_duration(timedelta(seconds=30)))
        assert tx.transaction_id == mk_transaction_id()
        assert tx.node_account_ids == (AccountId(0, 0, 3), AccountId(0, 0, 4))
        assert tx.max_transaction_fee == 5
        assert tx.transaction_valid_duration == 30

    def test_memo_limit(self):
        tx = Transaction(mk_node_update())
        tx.set_transaction_memo("a" * 100)
        with pytest.raises(ValidationError) as exc_info:
            tx.set_transaction_memo("é" * 51)
        assert exc_info.value.code == ErrorCode.MEMO_TOO_LONG
        assert tx.transaction_memo == "a" * 100

    @pytest.mark.parametrize("nodes", [[], ["0.0.3", "0.0.3"]])
    def test_invalid_node_lists(self, nodes):
        with pytest.raises(ValidationError):
            Transaction(mk_node_update()).set_node_account_ids(nodes)

    def test_invalid_fee_and_duration(self):
        tx = Transaction(mk_node_update())
        with pytest.raises(ValidationError):
            tx.set_max_transaction_fee(-1)
        with pytest.raises(ValidationError):
            tx.set_transaction_valid_duration(0)

    def test_retry_settings(self):
        tx = Transaction(mk_node_update()).set_max_attempts(3).set_max_backoff(2.0).set_min_backoff(0.5)
        policy = tx.retry_policy
        assert (policy.max_attempts, policy.min_backoff, policy.max_backoff) == (3, 0.5, 2.0)
        with pytest.raises(ValidationError):
            tx.set_min_backoff(5.0)
        with pytest.raises(ValidationError):
            tx.set_max_attempts(0)
        with pytest.raises(ValidationError):
            tx.set_max_attempts(True)
        assert tx.retry_policy.max_attempts == 3

    def test_rejects_non_payload(self):
        with pytest.raises(ValidationError):
            Transaction("not a payload")


class TestFreeze:
    """Freezing validates and locks."""

    def test_freeze_requires_transaction_id(self):
        tx = Transaction(mk_node_update()).set_node_account_ids(["0.0.3"])
        with pytest.raises(ValidationError):
            tx.freeze()
        assert not tx.is_frozen

    def test_freeze_requires_nodes(self):
        tx = Transaction(mk_node_update()).set_transaction_id(mk_transaction_id())
        with pytest.raises(ValidationError):
            tx.freeze()
        assert not tx.is_frozen

    def test_freeze_resolves_defaults(self):
        tx = mk_frozen_transaction()
        assert tx.is_frozen
        assert tx.max_transaction_fee == DEFAULT_MAX_TRANSACTION_FEE
        assert tx.transaction_valid_duration == DEFAULT_VALID_DURATION

    def test_freeze_is_idempotent(self):
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4"))
        first = tx.to_bytes()
        assert tx.freeze() is tx
        assert tx.to_bytes() == first

    def test_same_inputs_freeze_to_same_bytes(self):
        a = mk_frozen_transaction()
        b = mk_frozen_transaction()
        assert a.to_bytes() == b.to_bytes()

    def test_one_body_per_node(self):
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4", "0.0.5"))
        bodies = tx.get_body_bytes()
        assert list(bodies) == [AccountId(0, 0, 3), AccountId(0, 0, 4), AccountId(0, 0, 5)]
        assert len(set(bodies.values())) == 3

    def test_mutation_after_freeze_fails(self):
        tx = mk_frozen_transaction()
        before = tx.to_bytes()
        mutations = [
            lambda: tx.set_transaction_memo("changed"),
            lambda: tx.set_max_transaction_fee(1),
            lambda: tx.set_node_account_ids(["0.0.9"]),
            lambda: tx.set_transaction_id(mk_transaction_id(seconds=1)),
            lambda: tx.set_transaction_valid_duration(10),
            lambda: tx.set_max_attempts(2),
            lambda: tx.payload.set_description("changed"),
        ]
        for mutate in mutations:
            with pytest.raises(FreezeStateError) as exc_info:
                mutate()
            assert exc_info.value.code == ErrorCode.TRANSACTION_FROZEN
        assert tx.to_bytes() == before
        assert tx.payload.description == "test node"

    def test_admin_key_list_locked_after_freeze(self):
        keys = [mk_ed25519_keypair(seed)[1] for seed in (1, 2)]
        admin_key = KeyList([keys[0]], threshold=1)
        tx = mk_frozen_transaction(mk_node_update(admin_key=admin_key))
        scheduled = tx.to_schedulable().to_bytes()

        with pytest.raises(FreezeStateError):
            tx.payload.admin_key.add(keys[1])
        with pytest.raises(FreezeStateError):
            tx.payload.admin_key.threshold = 2

        # the caller's own list stays editable and no longer reaches the payload
        admin_key.add(keys[1])
        assert len(tx.payload.admin_key) == 1
        assert tx.payload.admin_key.threshold == 1
        assert tx.to_schedulable().to_bytes() == scheduled

    def test_unencodable_field_fails_freeze(self):
        payload = mk_node_update()
        payload.description = 123
        tx = Transaction(payload).set_transaction_id(mk_transaction_id()).set_node_account_ids(["0.0.3"])
        with pytest.raises(ValidationError) as exc_info:
            tx.freeze()
        assert exc_info.value.code == ErrorCode.MARSHAL_ERROR
        assert not tx.is_frozen

    def test_frozen_payload_cannot_be_reused(self):
        tx = mk_frozen_transaction()
        with pytest.raises(FreezeStateError):
            Transaction(tx.payload)


class TestConstructionError:
    """Missing required fields are recorded at freeze and raised on use."""

    def test_freeze_records_error(self):
        tx = mk_frozen_transaction(NodeUpdateBody(description="test"))
        assert tx.is_frozen
        assert isinstance(tx.construction_error, ConstructionError)
        assert tx.construction_error.missing_fields == frozenset({"node_id"})
        assert tx.construction_error.code == ErrorCode.INCOMPLETE_TRANSACTION

    def test_incomplete_transaction_still_serializes(self):
        tx = mk_frozen_transaction(NodeUpdateBody(description="test"))
        assert tx.to_bytes()

    def test_to_schedulable_raises(self):
        tx = mk_frozen_transaction(NodeUpdateBody(description="test"))
        with pytest.raises(ConstructionError) as exc_info:
            tx.to_schedulable()
        assert "node_id" in exc_info.value.missing_fields

    def test_complete_transaction_has_no_error(self):
        assert mk_frozen_transaction().construction_error is None


class TestSigning:
    """Signatures accumulate on a frozen transaction."""

    def test_sign_before_freeze_fails(self, fake_keypair):
        private_key, public_key = fake_keypair
        tx = Transaction(mk_node_update())
        with pytest.raises(FreezeStateError) as exc_info:
            tx.sign(private_key)
        assert exc_info.value.code == ErrorCode.TRANSACTION_NOT_FROZEN
        with pytest.raises(FreezeStateError):
            tx.add_signature(public_key, b"\x00" * 64)

    def test_sign_every_node_body(self, fake_keypair):
        private_key, public_key = fake_keypair
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4")).sign(private_key)

        for node, body in tx.get_body_bytes().items():
            signature = tx.get_signatures()[node][public_key]
            assert public_key.verify(signature, body)
        assert tx.is_signed_by(public_key)

    def test_ecdsa_signature_verifies(self):
        key = mk_ecdsa_key(11)
        tx = mk_frozen_transaction().sign(key)
        node, body = next(iter(tx.get_body_bytes().items()))
        assert key.public_key().verify(tx.get_signatures()[node][key.public_key()], body)

    def test_add_signature_replaces(self):
        _, public_key = mk_ed25519_keypair(1)
        tx = mk_frozen_transaction()
        tx.add_signature(public_key, b"\x01" * 64)
        tx.add_signature(public_key, b"\x02" * 64)
        signatures = tx.get_signatures()[AccountId(0, 0, 3)]
        assert list(signatures.values()) == [b"\x02" * 64]

    def test_add_signature_needs_single_node(self):
        _, public_key = mk_ed25519_keypair(1)
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4"))
        with pytest.raises(ValidationError):
            tx.add_signature(public_key, b"\x01" * 64)
        tx.add_signature_for_node("0.0.4", public_key, b"\x01" * 64)
        assert tx.get_signatures()[AccountId(0, 0, 3)] == {}
        assert tx.get_signatures()[AccountId(0, 0, 4)] == {public_key: b"\x01" * 64}

    def test_add_signature_for_unknown_node(self):
        _, public_key = mk_ed25519_keypair(1)
        with pytest.raises(ValidationError):
            mk_frozen_transaction().add_signature_for_node("0.0.99", public_key, b"\x01")

    def test_threshold_key_signatures(self):
        keys = [mk_ed25519_keypair(seed) for seed in (1, 2, 3)]
        threshold = KeyList([public for _, public in keys], threshold=2)
        tx = mk_frozen_transaction()
        body = tx.get_body_bytes()[AccountId(0, 0, 3)]
        tx.add_signature(threshold, {keys[0][1]: keys[0][0].sign(body), keys[1][1]: keys[1][0].sign(body)})
        assert list(tx.get_signatures()[AccountId(0, 0, 3)]) == [keys[0][1], keys[1][1]]

    def test_sign_with_external_signer(self, fake_keypair):
        private_key, public_key = fake_keypair
        seen = []

        def signer(body):
            seen.append(body)
            return private_key.sign(body)

        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4")).sign_with(public_key, signer)
        assert seen == list(tx.get_body_bytes().values())

    def test_failed_external_signer_adds_nothing(self, fake_keypair):
        _, public_key = fake_keypair
        results = iter([b"\x01" * 64, "not-bytes"])
        tx = mk_frozen_transaction(nodes=("0.0.3", "0.0.4"))
        with pytest.raises(ValidationError):
            tx.sign_with(public_key, lambda body: next(results))
        assert all(not signatures for signatures in tx.get_signatures().values())
        assert not tx.has_signatures

    def test_signature_order_follows_insertion(self):
        keys = [mk_ed25519_keypair(seed)[0] for seed in (9, 2, 5)]
        tx = mk_frozen_transaction()
        for key in keys:
            tx.sign(key)
        assert list(tx.get_signatures()[AccountId(0, 0, 3)]) == [key.public_key() for key in keys]

    def test_signing_does_not_change_body(self, fake_keypair):
        tx = mk_frozen_transaction()
        bodies = tx.get_body_bytes()
        tx.sign(fake_keypair[0])
        assert tx.get_body_bytes() == bodies

    def test_mutable_has_no_signatures(self):
        assert Transaction(mk_node_update()).get_signatures() == {}
