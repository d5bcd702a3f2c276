"""
Integrity module for wasmseal.

Tamper evidence for WebAssembly modules:
- Canonical hash over code, data and non-claim custom sections
- Embedding of signed claims that record that hash
- Extraction and verification of embedded claims
"""

from .canonical_hash import compute_canonical_hash

from .module_claims import (
    find_claim_section,
    extract_claims,
    embed_claims,
    sign_buffer_with_claims,
)

__all__ = [
    'compute_canonical_hash',
    'find_claim_section',
    'extract_claims',
    'embed_claims',
    'sign_buffer_with_claims',
]
