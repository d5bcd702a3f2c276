"""
Canonical Hash - tamper-evidence digest of a WebAssembly module.

We don't hash the entire file, only the parts that indicate tampering:

    ┌──────────────────────────────────────────────────────────┐
    │  module bytes                                            │
    │                                                          │
    │  CodeEntry ─────────────┐                                │
    │  DataEntry ─────────────┼──► SHA-256 ──► uppercase hex   │
    │  CustomSection (other) ─┘      (scan order)              │
    │                                                          │
    │  CustomSection (claim) ──► skipped                       │
    └──────────────────────────────────────────────────────────┘

Claim-carrying sections are excluded so that embedding a claim, which
records this very hash, leaves the hash unchanged.
"""

import hashlib
import logging
from typing import Optional

from ..constants import ClaimSectionNames, DEFAULT_SECTION_NAMES
from ..wasm.binary_reader import BytesLike
from ..wasm.scanner import CustomSection, scan_sections

logger = logging.getLogger(__name__)


def compute_canonical_hash(
    module_bytes: BytesLike,
    sections: Optional[ClaimSectionNames] = None,
) -> str:
    """
    Compute the canonical hash of a module.

    Args:
        module_bytes: Raw module bytes
        sections: Reserved claim-section names to exclude

    Returns:
        64-character uppercase hex SHA-256 digest

    Raises:
        MalformedContainerError: if the module cannot be scanned
    """
    sections = sections or DEFAULT_SECTION_NAMES
    context = hashlib.sha256()
    hashed = 0
    skipped = 0

    for section in scan_sections(module_bytes):
        if isinstance(section, CustomSection) and section.name in sections:
            skipped += 1
            continue
        context.update(section.data)
        hashed += 1

    digest = context.hexdigest().upper()
    logger.debug(
        f"Canonical hash {digest[:16]}... over {hashed} entries "
        f"({skipped} claim section(s) excluded)"
    )
    return digest
