"""
Address book payloads: create, update and delete consensus nodes.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Union

from ...codec.messages import (
    decode_account_id,
    decode_bool_value,
    decode_bytes_value,
    decode_endpoint,
    decode_key,
    decode_string_value,
    decoding,
    encode_account_id,
    encode_bool_value,
    encode_bytes_value,
    encode_endpoint,
    encode_key,
    encode_string_value,
)
from ...codec.reader import expect_bytes, expect_int, last_value, parse_fields
from ...codec.writer import ProtoWriter
from ...keys.key import Key
from ...runtime.endpoint import Endpoint
from ...runtime.entity_id import AccountId, EntityId
from ...runtime.errors import ValidationError
from .base import ServiceDescriptor, TransactionPayload, validate_optional, validate_optional_bytes
from .registry import register_payload


ADDRESS_BOOK_SERVICE = "proto.AddressBookService"


def _node_id(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError(f"node_id must be a non-negative integer, got {value!r}")
    return value


def _endpoints(name: str, values: Optional[Iterable[Endpoint]]) -> tuple:
    if values is None:
        return ()
    if isinstance(values, (str, bytes, Endpoint)):
        raise ValidationError(f"{name} must be a sequence of Endpoint, got {type(values).__name__}")
    try:
        endpoints = tuple(values)
    except TypeError:
        raise ValidationError(f"{name} must be a sequence of Endpoint, got {type(values).__name__}") from None
    for endpoint in endpoints:
        if not isinstance(endpoint, Endpoint):
            raise ValidationError(f"{name} entries must be Endpoint, got {type(endpoint).__name__}")
    return endpoints


def _endpoint(name: str, value: Optional[Endpoint]) -> Optional[Endpoint]:
    return validate_optional(name, value, Endpoint)


def _optional_bytes(fields, number: int, what: str) -> Optional[bytes]:
    value = last_value(fields, number)
    return None if value is None else expect_bytes(value, what)


def _decode_node_id(fields) -> Optional[int]:
    # node 0 is written explicitly, so an absent field means unset
    value = last_value(fields, 1)
    return None if value is None else expect_int(value, "node_id")


class NodeAttributesPayload(TransactionPayload):
    """
    Fields shared by node create and node update.

    Endpoint lists are stored as tuples so a frozen payload cannot be changed
    through them.
    """

    def __init__(
        self,
        account_id: Union[AccountId, str, None] = None,
        description: Optional[str] = None,
        gossip_endpoints: Optional[Iterable[Endpoint]] = None,
        service_endpoints: Optional[Iterable[Endpoint]] = None,
        gossip_ca_certificate: Optional[bytes] = None,
        grpc_certificate_hash: Optional[bytes] = None,
        admin_key: Optional[Key] = None,
        decline_reward: Optional[bool] = None,
        grpc_web_proxy_endpoint: Optional[Endpoint] = None,
    ):
        super().__init__()
        self.account_id: Optional[AccountId] = AccountId.coerce(account_id) if account_id is not None else None
        self.description = validate_optional("description", description, str)
        self.gossip_endpoints = _endpoints("gossip_endpoints", gossip_endpoints)
        self.service_endpoints = _endpoints("service_endpoints", service_endpoints)
        self.gossip_ca_certificate = validate_optional_bytes("gossip_ca_certificate", gossip_ca_certificate)
        self.grpc_certificate_hash = validate_optional_bytes("grpc_certificate_hash", grpc_certificate_hash)
        self.admin_key = validate_optional("admin_key", admin_key, Key)
        self.decline_reward = validate_optional("decline_reward", decline_reward, bool)
        self.grpc_web_proxy_endpoint = _endpoint("grpc_web_proxy_endpoint", grpc_web_proxy_endpoint)

    def set_account_id(self, account_id: Union[AccountId, str, None]):
        """Set the node's fee-collection account."""
        return self._set_entity('account_id', account_id, AccountId)

    def set_description(self, description: Optional[str]):
        """Set the node description."""
        return self._set('description', validate_optional('description', description, str))

    def set_gossip_endpoints(self, endpoints: Iterable[Endpoint]):
        """Replace the gossip endpoints."""
        return self._set('gossip_endpoints', _endpoints('gossip_endpoints', endpoints))

    def add_gossip_endpoint(self, endpoint: Endpoint):
        """Append one gossip endpoint."""
        return self._set('gossip_endpoints', self.gossip_endpoints + _endpoints('gossip_endpoints', [endpoint]))

    def set_service_endpoints(self, endpoints: Iterable[Endpoint]):
        """Replace the gRPC service endpoints."""
        return self._set('service_endpoints', _endpoints('service_endpoints', endpoints))

    def add_service_endpoint(self, endpoint: Endpoint):
        """Append one gRPC service endpoint."""
        return self._set('service_endpoints', self.service_endpoints + _endpoints('service_endpoints', [endpoint]))

    def set_gossip_ca_certificate(self, certificate: Optional[bytes]):
        """Set the DER encoded gossip CA certificate."""
        return self._set('gossip_ca_certificate', validate_optional_bytes('gossip_ca_certificate', certificate))

    def set_grpc_certificate_hash(self, certificate_hash: Optional[bytes]):
        """Set the SHA-384 hash of the node's gRPC TLS certificate."""
        return self._set('grpc_certificate_hash', validate_optional_bytes('grpc_certificate_hash', certificate_hash))

    def set_admin_key(self, admin_key: Optional[Key]):
        """Set the key that administers the node."""
        return self._set('admin_key', validate_optional('admin_key', admin_key, Key))

    def set_decline_reward(self, decline_reward: Optional[bool]):
        """Set whether the node declines staking rewards."""
        return self._set('decline_reward', validate_optional('decline_reward', decline_reward, bool))

    def set_grpc_web_proxy_endpoint(self, endpoint: Optional[Endpoint]):
        """Set the gRPC-web proxy endpoint."""
        return self._set('grpc_web_proxy_endpoint', _endpoint('grpc_web_proxy_endpoint', endpoint))

    def entity_ids(self) -> List[EntityId]:
        return [self.account_id] if self.account_id is not None else []


@register_payload
class NodeCreateBody(NodeAttributesPayload):
    """Payload that adds a consensus node to the address book."""

    payload_discriminator = 54
    schedulable_discriminator = 42
    required_fields = ('account_id', 'admin_key')

    def encode_body(self) -> bytes:
        w = ProtoWriter()
        if self.account_id is not None:
            w.message_field(1, encode_account_id(self.account_id))
        w.string_field(2, self.description)
        for endpoint in self.gossip_endpoints:
            w.message_field(3, encode_endpoint(endpoint))
        for endpoint in self.service_endpoints:
            w.message_field(4, encode_endpoint(endpoint))
        w.bytes_field(5, self.gossip_ca_certificate)
        w.bytes_field(6, self.grpc_certificate_hash)
        if self.admin_key is not None:
            w.message_field(7, encode_key(self.admin_key))
        w.bool_field(8, self.decline_reward)
        if self.grpc_web_proxy_endpoint is not None:
            w.message_field(9, encode_endpoint(self.grpc_web_proxy_endpoint))
        return w.to_bytes()

    @classmethod
    def decode_body(cls, data: bytes) -> NodeCreateBody:
        fields = parse_fields(data)
        account = _optional_bytes(fields, 1, "account_id")
        description = _optional_bytes(fields, 2, "description")
        admin_key = _optional_bytes(fields, 7, "admin_key")
        proxy = _optional_bytes(fields, 9, "grpc_proxy_endpoint")
        decline_reward = last_value(fields, 8)
        with decoding("node create body"):
            return cls(
                account_id=decode_account_id(account) if account is not None else None,
                description=description.decode("utf-8") if description is not None else None,
                gossip_endpoints=[decode_endpoint(expect_bytes(v, "gossip_endpoint")) for v in fields.get(3, [])],
                service_endpoints=[decode_endpoint(expect_bytes(v, "service_endpoint")) for v in fields.get(4, [])],
                gossip_ca_certificate=_optional_bytes(fields, 5, "gossip_ca_certificate"),
                grpc_certificate_hash=_optional_bytes(fields, 6, "grpc_certificate_hash"),
                admin_key=decode_key(admin_key) if admin_key is not None else None,
                decline_reward=bool(expect_int(decline_reward, "decline_reward")) if decline_reward is not None else None,
                grpc_web_proxy_endpoint=decode_endpoint(proxy) if proxy is not None else None,
            )

    def target_service_endpoint(self) -> ServiceDescriptor:
        return ServiceDescriptor(ADDRESS_BOOK_SERVICE, "createNode")


@register_payload
class NodeUpdateBody(NodeAttributesPayload):
    """
    Payload that changes the attributes of an existing node.

    Every attribute except ``node_id`` is optional; unset attributes are left
    unchanged by the network. Description, certificates and the reward flag
    travel as wrapper values so an explicit empty value can be told apart
    from "not set".
    """

    payload_discriminator = 55
    schedulable_discriminator = 43
    required_fields = ('node_id',)

    def __init__(self, node_id: Optional[int] = None, **kwargs):
        super().__init__(**kwargs)
        self.node_id = _node_id(node_id)

    def set_node_id(self, node_id: Optional[int]) -> NodeUpdateBody:
        """Set the id of the node to update."""
        return self._set('node_id', _node_id(node_id))

    def encode_body(self) -> bytes:
        w = ProtoWriter()
        w.uint64_field(1, self.node_id, always=True)
        if self.account_id is not None:
            w.message_field(2, encode_account_id(self.account_id))
        if self.description is not None:
            w.message_field(3, encode_string_value(self.description))
        for endpoint in self.gossip_endpoints:
            w.message_field(4, encode_endpoint(endpoint))
        for endpoint in self.service_endpoints:
            w.message_field(5, encode_endpoint(endpoint))
        if self.gossip_ca_certificate is not None:
            w.message_field(6, encode_bytes_value(self.gossip_ca_certificate))
        if self.grpc_certificate_hash is not None:
            w.message_field(7, encode_bytes_value(self.grpc_certificate_hash))
        if self.admin_key is not None:
            w.message_field(8, encode_key(self.admin_key))
        if self.decline_reward is not None:
            w.message_field(9, encode_bool_value(self.decline_reward))
        if self.grpc_web_proxy_endpoint is not None:
            w.message_field(10, encode_endpoint(self.grpc_web_proxy_endpoint))
        return w.to_bytes()

    @classmethod
    def decode_body(cls, data: bytes) -> NodeUpdateBody:
        fields = parse_fields(data)
        account = _optional_bytes(fields, 2, "account_id")
        description = _optional_bytes(fields, 3, "description")
        gossip_ca = _optional_bytes(fields, 6, "gossip_ca_certificate")
        cert_hash = _optional_bytes(fields, 7, "grpc_certificate_hash")
        admin_key = _optional_bytes(fields, 8, "admin_key")
        decline_reward = _optional_bytes(fields, 9, "decline_reward")
        proxy = _optional_bytes(fields, 10, "grpc_proxy_endpoint")
        with decoding("node update body"):
            return cls(
                node_id=_decode_node_id(fields),
                account_id=decode_account_id(account) if account is not None else None,
                description=decode_string_value(description) if description is not None else None,
                gossip_endpoints=[decode_endpoint(expect_bytes(v, "gossip_endpoint")) for v in fields.get(4, [])],
                service_endpoints=[decode_endpoint(expect_bytes(v, "service_endpoint")) for v in fields.get(5, [])],
                gossip_ca_certificate=decode_bytes_value(gossip_ca) if gossip_ca is not None else None,
                grpc_certificate_hash=decode_bytes_value(cert_hash) if cert_hash is not None else None,
                admin_key=decode_key(admin_key) if admin_key is not None else None,
                decline_reward=decode_bool_value(decline_reward) if decline_reward is not None else None,
                grpc_web_proxy_endpoint=decode_endpoint(proxy) if proxy is not None else None,
            )

    def target_service_endpoint(self) -> ServiceDescriptor:
        return ServiceDescriptor(ADDRESS_BOOK_SERVICE, "updateNode")

    def __repr__(self) -> str:
        return f"NodeUpdateBody(node_id={self.node_id!r}, description={self.description!r})"


@register_payload
class NodeDeleteBody(TransactionPayload):
    """Payload that removes a node from the address book."""

    payload_discriminator = 56
    schedulable_discriminator = 44
    required_fields = ('node_id',)

    def __init__(self, node_id: Optional[int] = None):
        super().__init__()
        self.node_id = _node_id(node_id)

    def set_node_id(self, node_id: Optional[int]) -> NodeDeleteBody:
        """Set the id of the node to delete."""
        return self._set('node_id', _node_id(node_id))

    def encode_body(self) -> bytes:
        w = ProtoWriter()
        w.uint64_field(1, self.node_id, always=True)
        return w.to_bytes()

    @classmethod
    def decode_body(cls, data: bytes) -> NodeDeleteBody:
        fields = parse_fields(data)
        return cls(node_id=_decode_node_id(fields))

    def target_service_endpoint(self) -> ServiceDescriptor:
        return ServiceDescriptor(ADDRESS_BOOK_SERVICE, "deleteNode")

    def __repr__(self) -> str:
        return f"NodeDeleteBody(node_id={self.node_id!r})"


__all__ = [
    "NodeCreateBody",
    "NodeUpdateBody",
    "NodeDeleteBody",
    "ADDRESS_BOOK_SERVICE",
]
