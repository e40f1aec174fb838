"""
Protobuf-compatible binary writer.

Implements the structured-binary wire format used by the network services:
every field is a varint tag (field number << 3 | wire type) followed by
either a varint or a length-prefixed byte string. Negative int64 values are
written as ten-byte two's complement varints, the same as other clients.
"""

from __future__ import annotations

import struct
from typing import Callable, List, Optional


WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5

MAX_FIELD_NUMBER = (1 << 29) - 1


class ProtoWriter:
    """
    Binary writer for tagged fields.

    Primitive methods (u8, uvarint, bytes, len_prefixed_bytes) write raw
    data; the ``*_field`` methods write a tag followed by a value and omit
    default values the way proto3 does unless ``always`` is set.
    """

    def __init__(self):
        """Initialize writer with empty byte buffer."""
        self._bb: List[int] = []

    def u8(self, v: int) -> None:
        """Write unsigned 8-bit integer."""
        self._bb.append(v & 0xFF)

    def u32le(self, v: int) -> None:
        """Write unsigned 32-bit integer in little-endian format."""
        self._bb.extend(struct.pack('<I', v & 0xFFFFFFFF))

    def u64le(self, v: int) -> None:
        """Write unsigned 64-bit integer in little-endian format."""
        self._bb.extend(struct.pack('<Q', v & 0xFFFFFFFFFFFFFFFF))

    def bytes(self, v: bytes) -> None:
        """Write raw bytes without length prefix."""
        self._bb.extend(v)

    def uvarint(self, v: int) -> None:
        """
        Write unsigned varint in ULEB128 format.

        Values are masked to 64 bits, so negative numbers come out as their
        two's complement (ten bytes).
        """
        x = v & 0xFFFFFFFFFFFFFFFF
        while x >= 0x80:
            self.u8((x & 0x7F) | 0x80)
            x >>= 7
        self.u8(x)

    def len_prefixed_bytes(self, v: bytes) -> None:
        """Write bytes with length prefix using uvarint."""
        self.uvarint(len(v))
        self.bytes(v)

    def tag(self, field: int, wire_type: int) -> None:
        """
        Write a field tag.

        Raises:
            ValueError: If field number is out of range
        """
        if field < 1 or field > MAX_FIELD_NUMBER:
            raise ValueError(f"Field number is out of range [1, {MAX_FIELD_NUMBER}]: {field}")
        self.uvarint((field << 3) | wire_type)

    # Tagged fields

    def uint64_field(self, field: int, v: Optional[int], always: bool = False) -> None:
        if v is None or (v == 0 and not always):
            return
        if v < 0:
            raise ValueError(f"uint64 field {field} cannot be negative: {v}")
        self.tag(field, WIRE_VARINT)
        self.uvarint(v)

    def int64_field(self, field: int, v: Optional[int], always: bool = False) -> None:
        if v is None or (v == 0 and not always):
            return
        self.tag(field, WIRE_VARINT)
        self.uvarint(v)

    # int32 and uint32 share the varint encoding with int64
    int32_field = int64_field
    uint32_field = uint64_field

    def bool_field(self, field: int, v: Optional[bool], always: bool = False) -> None:
        if v is None or (not v and not always):
            return
        self.tag(field, WIRE_VARINT)
        self.u8(1 if v else 0)

    def bytes_field(self, field: int, v: Optional[bytes], always: bool = False) -> None:
        if v is None or (len(v) == 0 and not always):
            return
        self.tag(field, WIRE_LEN)
        self.len_prefixed_bytes(v)

    def string_field(self, field: int, v: Optional[str], always: bool = False) -> None:
        if v is None:
            return
        self.bytes_field(field, v.encode('utf-8'), always)

    def message_field(self, field: int, encoded: Optional[bytes]) -> None:
        """Write an already-encoded sub-message. Empty messages are kept."""
        if encoded is None:
            return
        self.tag(field, WIRE_LEN)
        self.len_prefixed_bytes(encoded)

    def nested(self, field: int, build: Callable[["ProtoWriter"], None]) -> None:
        """Encode a sub-message with a fresh writer and append it as a field."""
        sub = ProtoWriter()
        build(sub)
        self.message_field(field, sub.to_bytes())

    def to_bytes(self) -> bytes:
        """Return accumulated bytes as immutable bytes object."""
        return bytes(self._bb)
