"""
Client configuration tests.
"""

import pytest

from hiero_client.client import NETWORKS, Client, ClientConfig
from hiero_client.crypto import EcdsaSecp256k1PrivateKey, Ed25519PrivateKey
from hiero_client.runtime.entity_id import AccountId
from hiero_client.runtime.errors import ChecksumError, ValidationError
from hiero_client.runtime.ledger import LedgerId


class TestClientFactories:

    def test_for_testnet(self):
        client = Client.for_testnet()
        assert client.ledger_id == LedgerId.testnet()
        assert client.network == [AccountId.from_string(node) for node in NETWORKS['testnet']]
        assert client.operator is None
        assert client.submitter is None

    def test_for_mainnet_and_previewnet(self):
        assert Client.for_mainnet().ledger_id.is_mainnet()
        assert Client.for_previewnet().ledger_id.is_previewnet()
        assert len(Client.for_mainnet().network) == len(NETWORKS['mainnet'])

    def test_for_name_with_overrides(self):
        client = Client.for_name("mainnet", network=["0.0.3"], auto_validate_checksums=True)
        assert client.network == [AccountId(0, 0, 3)]
        assert client.auto_validate_checksums

    def test_unknown_name(self):
        with pytest.raises(ValidationError):
            Client.for_name("moonnet")

    def test_config_coercion(self):
        client = Client(ClientConfig(ledger_id="previewnet", network=["0.0.5", 6]))
        assert client.ledger_id == LedgerId.previewnet()
        assert client.network == [AccountId(0, 0, 5), AccountId(0, 0, 6)]


class TestOperator:

    def test_set_operator(self, fake_keypair):
        private_key, public_key = fake_keypair
        client = Client.for_testnet().set_operator("0.0.2", private_key)
        assert client.operator_account_id == AccountId(0, 0, 2)
        assert client.operator_public_key == public_key

    def test_operator_checksum_validated(self, fake_keypair):
        client = Client.for_testnet().set_auto_validate_checksums(True)
        with pytest.raises(ChecksumError):
            client.set_operator("0.0.123-vfmkw", fake_keypair[0])
        client.set_operator("0.0.123-esxsf", fake_keypair[0])


class TestFromEnv:

    def test_defaults_to_testnet(self):
        client = Client.from_env({})
        assert client.ledger_id.is_testnet()
        assert client.operator is None

    def test_operator_from_env(self):
        environ = {
            "HIERO_NETWORK": "previewnet",
            "OPERATOR_ID": "0.0.1234",
            "OPERATOR_KEY": "ecdsa:" + "22" * 32,
        }
        client = Client.from_env(environ)
        assert client.ledger_id.is_previewnet()
        assert client.operator_account_id == AccountId(0, 0, 1234)
        assert isinstance(client.operator.private_key, EcdsaSecp256k1PrivateKey)

    def test_raw_key_is_ed25519(self):
        client = Client.from_env({"OPERATOR_ID": "0.0.2", "OPERATOR_KEY": "0x" + "33" * 32})
        assert isinstance(client.operator.private_key, Ed25519PrivateKey)

    def test_partial_operator(self):
        with pytest.raises(ValidationError):
            Client.from_env({"OPERATOR_ID": "0.0.2"})
