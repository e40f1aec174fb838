"""
Protobuf-compatible binary reader.

Reads the tagged-field format written by ProtoWriter. Every read is bounds
checked; truncated or malformed input raises DecodeError and never returns a
partial value.
"""

import builtins
import struct
from typing import Dict, Iterator, List, Tuple, Union

from ..runtime.errors import DecodeError, ErrorCode
from .writer import WIRE_FIXED32, WIRE_FIXED64, WIRE_LEN, WIRE_VARINT


FieldValue = Union[int, builtins.bytes]

MAX_VARINT_BYTES = 10


class ProtoReader:
    """
    Binary reader for tagged fields.
    """

    def __init__(self, buf: builtins.bytes):
        """
        Initialize reader with byte buffer.

        Args:
            buf: Byte buffer to read from
        """
        if not isinstance(buf, (builtins.bytes, bytearray, memoryview)):
            raise DecodeError(f"Expected bytes, got {type(buf).__name__}", ErrorCode.INVALID_BINARY)
        self._buf = builtins.bytes(buf)
        self._off = 0

    @property
    def eof(self) -> bool:
        """True if at end of buffer."""
        return self._off >= len(self._buf)

    def u8(self) -> int:
        """Read unsigned 8-bit integer."""
        if self._off >= len(self._buf):
            raise DecodeError("Buffer overflow: attempting to read beyond end")
        val = self._buf[self._off]
        self._off += 1
        return val

    def u32le(self) -> int:
        """Read unsigned 32-bit integer in little-endian format."""
        if self._off + 4 > len(self._buf):
            raise DecodeError("Buffer overflow: attempting to read u32le beyond end")
        val = struct.unpack("<I", self._buf[self._off : self._off + 4])[0]
        self._off += 4
        return val

    def u64le(self) -> int:
        """Read unsigned 64-bit integer in little-endian format."""
        if self._off + 8 > len(self._buf):
            raise DecodeError("Buffer overflow: attempting to read u64le beyond end")
        val = struct.unpack("<Q", self._buf[self._off : self._off + 8])[0]
        self._off += 8
        return val

    def uvarint(self) -> int:
        """Read unsigned varint in ULEB128 format."""
        x = 0
        s = 0
        for _ in range(MAX_VARINT_BYTES):
            if self._off >= len(self._buf):
                raise DecodeError("Buffer overflow: attempting to read varint beyond end")
            b = self.u8()
            if b < 0x80:
                return x | (b << s)
            x |= (b & 0x7F) << s
            s += 7
        raise DecodeError("Varint is longer than 10 bytes")

    def bytes(self, n: int) -> builtins.bytes:
        """Read n bytes from buffer."""
        if n < 0 or self._off + n > len(self._buf):
            raise DecodeError(f"Buffer overflow: attempting to read {n} bytes beyond end")
        out = self._buf[self._off : self._off + n]
        self._off += n
        return out

    def len_prefixed_bytes(self) -> builtins.bytes:
        """Read bytes with length prefix using uvarint."""
        n = self.uvarint()
        return self.bytes(n)

    def read_field(self) -> Tuple[int, int, FieldValue]:
        """
        Read one tagged field.

        Returns:
            (field number, wire type, value) where value is an int for
            varint/fixed wire types and bytes for length-delimited fields
        """
        key = self.uvarint()
        field = key >> 3
        wire_type = key & 0x07
        if field == 0:
            raise DecodeError("Invalid field number 0")
        if wire_type == WIRE_VARINT:
            return field, wire_type, self.uvarint()
        if wire_type == WIRE_LEN:
            return field, wire_type, self.len_prefixed_bytes()
        if wire_type == WIRE_FIXED64:
            return field, wire_type, self.u64le()
        if wire_type == WIRE_FIXED32:
            return field, wire_type, self.u32le()
        raise DecodeError(f"Unsupported wire type {wire_type} for field {field}")

    def fields(self) -> Iterator[Tuple[int, int, FieldValue]]:
        """Iterate over all remaining fields."""
        while not self.eof:
            yield self.read_field()


def parse_fields(data: builtins.bytes) -> Dict[int, List[FieldValue]]:
    """
    Read every field of a message into a mapping of field number to values.

    Repeated fields keep their order. The whole message is consumed before
    anything is returned.
    """
    result: Dict[int, List[FieldValue]] = {}
    for field, _wire_type, value in ProtoReader(data).fields():
        result.setdefault(field, []).append(value)
    return result


def last_value(fields: Dict[int, List[FieldValue]], number: int, default=None):
    """Last occurrence of a singular field (proto semantics)."""
    values = fields.get(number)
    if not values:
        return default
    return values[-1]


def expect_bytes(value: FieldValue, what: str) -> builtins.bytes:
    if not isinstance(value, builtins.bytes):
        raise DecodeError(f"Expected length-delimited value for {what}")
    return value


def expect_int(value: FieldValue, what: str) -> int:
    if not isinstance(value, int):
        raise DecodeError(f"Expected varint value for {what}")
    return value


def to_signed64(value: int) -> int:
    """Interpret a 64-bit varint as a two's complement int64."""
    value &= 0xFFFFFFFFFFFFFFFF
    if value >= 1 << 63:
        return value - (1 << 64)
    return value
