"""
Binary Reader - bounded cursor over WebAssembly module bytes.

Reads the primitive encodings used by the module's section structure:
single bytes, unsigned/signed LEB128 integers (including padded forms such
as ``8a 80 80 80 00``), fixed-width little-endian words and length-prefixed
byte vectors. Every read is bounds checked and raises
MalformedContainerError with the absolute offset of the failure.
"""

import struct
from typing import Optional, Union

from ..errors import MalformedContainerError

BytesLike = Union[bytes, bytearray, memoryview]

# A u32 LEB128 occupies at most 5 bytes, a u64 at most 10
MAX_U32_LEB_BYTES = 5
MAX_U64_LEB_BYTES = 10


class BinaryReader:
    """Forward-only reader over ``data[start:end]``."""

    def __init__(self, data: BytesLike, start: int = 0, end: Optional[int] = None):
        self._data = memoryview(data)
        self.position = start
        self.end = len(self._data) if end is None else end
        if self.end > len(self._data):
            raise MalformedContainerError("Reader window exceeds input", offset=start)

    @property
    def remaining(self) -> int:
        return self.end - self.position

    def eof(self) -> bool:
        return self.position >= self.end

    def _require(self, count: int, what: str) -> None:
        if count < 0 or self.position + count > self.end:
            raise MalformedContainerError(
                f"Unexpected end of input reading {what}: need {count} bytes, "
                f"{self.remaining} available",
                offset=self.position,
            )

    def read_u8(self) -> int:
        self._require(1, "byte")
        value = self._data[self.position]
        self.position += 1
        return value

    def read_bytes(self, count: int, what: str = "bytes") -> bytes:
        self._require(count, what)
        value = self._data[self.position:self.position + count].tobytes()
        self.position += count
        return value

    def skip(self, count: int, what: str = "bytes") -> None:
        self._require(count, what)
        self.position += count

    def read_u32_le(self) -> int:
        self._require(4, "u32")
        (value,) = struct.unpack_from('<I', self._data, self.position)
        self.position += 4
        return value

    def _read_uleb(self, max_bytes: int, bits: int) -> int:
        start = self.position
        result = 0
        shift = 0
        for _ in range(max_bytes):
            byte = self.read_u8()
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                if result >> bits:
                    raise MalformedContainerError(
                        f"LEB128 value out of range for u{bits}", offset=start
                    )
                return result
            shift += 7
        raise MalformedContainerError(
            f"LEB128 encoding longer than {max_bytes} bytes", offset=start
        )

    def read_var_u32(self) -> int:
        """Read an unsigned LEB128 u32."""
        return self._read_uleb(MAX_U32_LEB_BYTES, 32)

    def read_var_s64(self) -> int:
        """Read a signed LEB128 integer of up to 64 bits."""
        start = self.position
        result = 0
        shift = 0
        for _ in range(MAX_U64_LEB_BYTES):
            byte = self.read_u8()
            result |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                if byte & 0x40:
                    result -= 1 << shift
                return result
        raise MalformedContainerError("Signed LEB128 encoding too long", offset=start)

    def read_length_prefixed(self, what: str = "vector") -> bytes:
        """Read a u32 length followed by that many bytes."""
        length = self.read_var_u32()
        return self.read_bytes(length, what)

    def read_name(self) -> str:
        """Read a length-prefixed UTF-8 name."""
        start = self.position
        raw = self.read_length_prefixed("name")
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedContainerError(f"Section name is not valid UTF-8: {e}", offset=start) from e
