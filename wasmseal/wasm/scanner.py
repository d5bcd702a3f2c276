"""
Section Scanner - lazy walk over a WebAssembly module's top-level sections.

Yields, in on-disk order, one value per logical unit the integrity layer
cares about:

    CodeEntry       one function body from the code section (id 10)
    DataEntry       one segment's init bytes from the data section (id 11)
    CustomSection   a named custom section (id 0) with its payload

All other sections are framed and bounds checked, then skipped without
decoding. Instruction bytes inside function bodies are never decoded. Any
structural violation raises MalformedContainerError; nothing is buffered
beyond the section currently being yielded.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Union

from ..errors import MalformedContainerError
from .binary_reader import BinaryReader, BytesLike

logger = logging.getLogger(__name__)


# WebAssembly magic and version
WASM_MAGIC = b'\x00asm'
WASM_VERSION = 1
HEADER_SIZE = 8


class SectionId(IntEnum):
    """WebAssembly section IDs."""
    CUSTOM = 0
    TYPE = 1
    IMPORT = 2
    FUNCTION = 3
    TABLE = 4
    MEMORY = 5
    GLOBAL = 6
    EXPORT = 7
    START = 8
    ELEMENT = 9
    CODE = 10
    DATA = 11
    DATA_COUNT = 12
    TAG = 13


# Opcodes allowed in a data segment's offset expression
OP_END = 0x0B
OP_GLOBAL_GET = 0x23
OP_I32_CONST = 0x41
OP_I64_CONST = 0x42
OP_F32_CONST = 0x43
OP_F64_CONST = 0x44
OP_REF_NULL = 0xD0
OP_REF_FUNC = 0xD2
OP_SIMD_PREFIX = 0xFD
SIMD_V128_CONST = 12
# Extended-const arithmetic (i32/i64 add, sub, mul) take no immediates
EXTENDED_CONST_OPS = frozenset((0x6A, 0x6B, 0x6C, 0x7C, 0x7D, 0x7E))


@dataclass(frozen=True)
class CodeEntry:
    """A function body (locals and instructions, without its size prefix)."""
    data: bytes
    offset: int


@dataclass(frozen=True)
class DataEntry:
    """The init bytes of one data segment."""
    data: bytes
    offset: int
    passive: bool = False


@dataclass(frozen=True)
class CustomSection:
    """A named custom section; start/end span the whole section."""
    name: str
    data: bytes
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


Section = Union[CodeEntry, DataEntry, CustomSection]


def _read_header(reader: BinaryReader) -> None:
    if reader.remaining < HEADER_SIZE:
        raise MalformedContainerError("Input too short for a module header", offset=0)
    magic = reader.read_bytes(4, "magic")
    if magic != WASM_MAGIC:
        raise MalformedContainerError(f"Bad magic number {magic.hex()}", offset=0)
    version = reader.read_u32_le()
    if version != WASM_VERSION:
        raise MalformedContainerError(f"Unsupported module version {version:#x}", offset=4)


def _skip_const_expr(reader: BinaryReader) -> None:
    """Skip an offset expression up to and including its end opcode."""
    while True:
        op_offset = reader.position
        opcode = reader.read_u8()
        if opcode == OP_END:
            return
        if opcode in (OP_I32_CONST, OP_I64_CONST):
            reader.read_var_s64()
        elif opcode == OP_F32_CONST:
            reader.skip(4, "f32 immediate")
        elif opcode == OP_F64_CONST:
            reader.skip(8, "f64 immediate")
        elif opcode in (OP_GLOBAL_GET, OP_REF_FUNC):
            reader.read_var_u32()
        elif opcode == OP_REF_NULL:
            reader.read_var_s64()
        elif opcode == OP_SIMD_PREFIX:
            if reader.read_var_u32() != SIMD_V128_CONST:
                raise MalformedContainerError("Unsupported SIMD opcode in constant expression", offset=op_offset)
            reader.skip(16, "v128 immediate")
        elif opcode not in EXTENDED_CONST_OPS:
            raise MalformedContainerError(
                f"Opcode {opcode:#04x} not allowed in constant expression", offset=op_offset
            )


def _scan_code(module: BytesLike, start: int, end: int) -> Iterator[CodeEntry]:
    reader = BinaryReader(module, start, end)
    count = reader.read_var_u32()
    for _ in range(count):
        body_size = reader.read_var_u32()
        offset = reader.position
        yield CodeEntry(data=reader.read_bytes(body_size, "function body"), offset=offset)
    if not reader.eof():
        raise MalformedContainerError("Trailing bytes after code section entries", offset=reader.position)


def _scan_data(module: BytesLike, start: int, end: int) -> Iterator[DataEntry]:
    reader = BinaryReader(module, start, end)
    count = reader.read_var_u32()
    for _ in range(count):
        flags_offset = reader.position
        flags = reader.read_var_u32()
        if flags == 0:
            _skip_const_expr(reader)
        elif flags == 2:
            reader.read_var_u32()  # memory index
            _skip_const_expr(reader)
        elif flags != 1:
            raise MalformedContainerError(f"Invalid data segment flags {flags}", offset=flags_offset)
        length = reader.read_var_u32()
        offset = reader.position
        yield DataEntry(
            data=reader.read_bytes(length, "data segment"),
            offset=offset,
            passive=flags == 1,
        )
    if not reader.eof():
        raise MalformedContainerError("Trailing bytes after data segments", offset=reader.position)


def scan_sections(module_bytes: BytesLike) -> Iterator[Section]:
    """
    Lazily yield the code entries, data entries and custom sections of a module.

    Raises:
        MalformedContainerError: bad magic/version, truncated section,
            invalid length prefix or unknown section id
    """
    reader = BinaryReader(module_bytes)
    _read_header(reader)

    while not reader.eof():
        section_start = reader.position
        section_id = reader.read_u8()
        size = reader.read_var_u32()
        body_start = reader.position
        reader.skip(size, f"section {section_id} body")
        body_end = reader.position

        if section_id == SectionId.CUSTOM:
            body = BinaryReader(module_bytes, body_start, body_end)
            name = body.read_name()
            yield CustomSection(
                name=name,
                data=body.read_bytes(body.remaining, "custom section payload"),
                start=section_start,
                end=body_end,
            )
        elif section_id == SectionId.CODE:
            yield from _scan_code(module_bytes, body_start, body_end)
        elif section_id == SectionId.DATA:
            yield from _scan_data(module_bytes, body_start, body_end)
        elif section_id > max(SectionId):
            raise MalformedContainerError(f"Unknown section id {section_id}", offset=section_start)


def iter_custom_sections(module_bytes: BytesLike) -> Iterator[CustomSection]:
    """Yield only the custom sections of a module, in order."""
    for section in scan_sections(module_bytes):
        if isinstance(section, CustomSection):
            yield section
