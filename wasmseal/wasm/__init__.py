"""
WebAssembly container support for wasmseal.

Only the section structure is understood: sections are framed, bounds
checked and yielded; instruction bytes are never decoded.
"""

from .binary_reader import BinaryReader

from .scanner import (
    SectionId,
    CodeEntry,
    DataEntry,
    CustomSection,
    Section,
    scan_sections,
    iter_custom_sections,
    WASM_MAGIC,
    WASM_VERSION,
)

from .writer import (
    encode_var_u32,
    encode_name,
    encode_section,
    encode_custom_section,
    write_custom_section,
    strip_custom_sections,
)

__all__ = [
    'BinaryReader',

    # Scanning
    'SectionId',
    'CodeEntry',
    'DataEntry',
    'CustomSection',
    'Section',
    'scan_sections',
    'iter_custom_sections',
    'WASM_MAGIC',
    'WASM_VERSION',

    # Writing
    'encode_var_u32',
    'encode_name',
    'encode_section',
    'encode_custom_section',
    'write_custom_section',
    'strip_custom_sections',
]
