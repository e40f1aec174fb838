"""
Shared fixtures for the transaction layer tests.
"""

import pytest

from hiero_client.client import Client, ClientConfig
from hiero_client.runtime.ledger import LedgerId
from hiero_client.tx.builders.registry import PAYLOAD_REGISTRY

from helpers.factories import (
    FakeSubmitter,
    mk_ecdsa_key,
    mk_ed25519_keypair,
)


@pytest.fixture
def payload_registry():
    """Registry of all available payload types."""
    return PAYLOAD_REGISTRY.copy()


@pytest.fixture
def fake_keypair():
    """Provide a deterministic Ed25519 key pair for testing."""
    return mk_ed25519_keypair(b'test_seed_for_deterministic_key_pair'[:32])


@pytest.fixture
def ecdsa_key():
    """Provide a deterministic ECDSA secp256k1 private key."""
    return mk_ecdsa_key(7)


@pytest.fixture
def fake_submitter():
    return FakeSubmitter()


@pytest.fixture
def client(fake_keypair, fake_submitter):
    """Testnet client with an operator and a recording submitter."""
    private_key, _ = fake_keypair
    config = ClientConfig(ledger_id=LedgerId.testnet(), network=["0.0.3", "0.0.4"])
    client = Client(config, submitter=fake_submitter)
    client.set_operator("0.0.2", private_key)
    return client
