#!/usr/bin/env python3
"""
Example: Node Update, Offline

This example demonstrates:
- Building a node update transaction for the operator from the environment
- Freezing, signing and serializing it without a network connection
- Decoding the bytes back and wrapping the transaction in a schedule

Set OPERATOR_ID and OPERATOR_KEY (and optionally HIERO_NETWORK) before running.
"""

import logging

from hiero_client import (
    Client,
    Ed25519PrivateKey,
    Endpoint,
    NodeUpdateBody,
    Transaction,
)


def main():
    logging.basicConfig(level=logging.DEBUG)

    client = Client.from_env()
    if client.operator is None:
        print("OPERATOR_ID and OPERATOR_KEY are not set; using a throwaway key")
        client.set_operator("0.0.2", Ed25519PrivateKey.generate())

    admin_key = Ed25519PrivateKey.generate()

    payload = (NodeUpdateBody()
               .set_node_id(1)
               .set_description("test")
               .add_gossip_endpoint(Endpoint.for_address("10.0.0.1", 50111))
               .set_admin_key(admin_key.public_key()))

    tx = Transaction(payload).freeze_with(client)
    tx.sign(admin_key)
    tx.sign_with_operator(client)

    data = tx.to_bytes()
    print(f"Transaction id: {tx.transaction_id}")
    print(f"Nodes: {', '.join(str(node) for node in tx.node_account_ids)}")
    print(f"Encoded {len(data)} bytes, hash {tx.get_transaction_hash().hex()[:16]}...")

    decoded = Transaction.from_bytes(data)
    print(f"Decoded node id {decoded.payload.node_id}, description {decoded.payload.description!r}")

    scheduled = Transaction(NodeUpdateBody(node_id=1, description="scheduled")).schedule()
    scheduled.freeze_with(client)
    print(f"Schedule create transaction {scheduled.transaction_id} ready to sign")


if __name__ == "__main__":
    main()
