"""
Section Writer - produce new module bytes with custom sections added or removed.

Custom sections may appear anywhere after the header and are ignored by
engines that do not recognize their name, so a claim can be appended to the
end of any module without affecting how it runs.
"""

import logging
from typing import Iterable

from .binary_reader import BytesLike
from .scanner import SectionId, iter_custom_sections

logger = logging.getLogger(__name__)


def encode_var_u32(value: int) -> bytes:
    """Encode an unsigned integer as minimal LEB128."""
    if value < 0 or value >> 32:
        raise ValueError(f"{value} does not fit in a u32")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_name(name: str) -> bytes:
    """Encode a length-prefixed UTF-8 name."""
    raw = name.encode('utf-8')
    return encode_var_u32(len(raw)) + raw


def encode_section(section_id: int, body: bytes) -> bytes:
    """Frame a section body with its id byte and size prefix."""
    return bytes([section_id]) + encode_var_u32(len(body)) + body


def encode_custom_section(name: str, payload: bytes) -> bytes:
    """Encode a complete custom section."""
    return encode_section(SectionId.CUSTOM, encode_name(name) + bytes(payload))


def write_custom_section(module_bytes: BytesLike, name: str, payload: bytes) -> bytes:
    """
    Return a copy of ``module_bytes`` with a custom section appended.

    The input is not modified.
    """
    section = encode_custom_section(name, payload)
    logger.debug(f"Appending custom section '{name}' ({len(section)} bytes)")
    return bytes(module_bytes) + section


def strip_custom_sections(module_bytes: BytesLike, names: Iterable[str]) -> bytes:
    """
    Return a copy of ``module_bytes`` without any custom section named in ``names``.

    Raises:
        MalformedContainerError: if the module cannot be scanned
    """
    names = frozenset(names)
    source = memoryview(module_bytes)
    out = bytearray()
    cursor = 0
    removed = 0

    for section in iter_custom_sections(module_bytes):
        if section.name in names:
            out += source[cursor:section.start]
            cursor = section.end
            removed += 1

    out += source[cursor:]
    if removed:
        logger.debug(f"Removed {removed} custom section(s) named {sorted(names)}")
    return bytes(out)
