"""
Network endpoint value type used by address-book payloads.
"""

from __future__ import annotations
import ipaddress
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Endpoint(BaseModel):
    """
    A gossip, gRPC or proxy endpoint of a consensus node.

    ``address`` is the four raw IPv4 bytes; a dotted string is accepted and
    converted.
    """

    address: Optional[bytes] = Field(default=None, description="IPv4 address bytes")
    port: int = Field(default=0, ge=0, le=65535)
    domain_name: Optional[str] = Field(default=None, alias="domainName")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('address', mode='before')
    @classmethod
    def parse_address(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return ipaddress.IPv4Address(v).packed
            except ipaddress.AddressValueError as e:
                raise ValueError(f"Invalid IPv4 address: {v}") from e
        return v

    @field_validator('address')
    @classmethod
    def check_address_length(cls, v: Optional[bytes]) -> Optional[bytes]:
        if v is not None and len(v) != 4:
            raise ValueError(f"IPv4 address must be 4 bytes, got {len(v)}")
        return v

    @classmethod
    def for_domain(cls, domain_name: str, port: int) -> Endpoint:
        return cls(domain_name=domain_name, port=port)

    @classmethod
    def for_address(cls, address: str, port: int) -> Endpoint:
        return cls(address=address, port=port)

    def __str__(self) -> str:
        host = self.domain_name if self.domain_name else (
            str(ipaddress.IPv4Address(self.address)) if self.address else "")
        return f"{host}:{self.port}"


__all__ = ["Endpoint"]
