from .factories import (
    FakeSubmitter,
    mk_ecdsa_key,
    mk_ed25519_keypair,
    mk_endpoint,
    mk_frozen_transaction,
    mk_node_create,
    mk_node_delete,
    mk_node_update,
    mk_transaction_id,
)

__all__ = [
    "FakeSubmitter",
    "mk_ecdsa_key",
    "mk_ed25519_keypair",
    "mk_endpoint",
    "mk_frozen_transaction",
    "mk_node_create",
    "mk_node_delete",
    "mk_node_update",
    "mk_transaction_id",
]
