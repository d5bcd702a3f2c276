"""
wasmseal - signed, tamper-evident capability claims for WebAssembly modules.

A module carries a signed claim (issuer, subject, capabilities, validity
window) in a custom section, together with a canonical hash of its code,
data and other custom sections. Hosts extract the claim and refuse modules
whose contents no longer match the recorded hash.

Usage:
    from wasmseal import Ed25519KeyPair, sign_buffer_with_claims, extract_claims

    account = Ed25519KeyPair.generate()
    module = Ed25519KeyPair.generate()
    signed = sign_buffer_with_claims("echo", wasm_bytes, module, account, caps=["messaging"])
    token = extract_claims(signed)
"""

__version__ = "0.3.0"

from .errors import (
    ErrorKind,
    WasmSealError,
    MalformedContainerError,
    ClaimEncodingError,
    InvalidTokenError,
    InvalidAlgorithmError,
    InvalidModuleHashError,
    SigningError,
    ConfigError,
)

from .constants import (
    ClaimSections,
    ClaimSectionNames,
    DEFAULT_SECTION_NAMES,
    Revisions,
)

from .claims.models import Claims, ModuleMetadata, Token

from .crypto import (
    SigningKeyPair,
    Ed25519KeyPair,
    ClaimsCodec,
    JwtClaimsCodec,
)

from .claims.validation import TokenValidation, validate_token

from .integrity import (
    compute_canonical_hash,
    find_claim_section,
    extract_claims,
    embed_claims,
    sign_buffer_with_claims,
)

from .utils.time_helpers import days_from_now_to_jwt_time

__all__ = [
    '__version__',

    # Errors
    'ErrorKind',
    'WasmSealError',
    'MalformedContainerError',
    'ClaimEncodingError',
    'InvalidTokenError',
    'InvalidAlgorithmError',
    'InvalidModuleHashError',
    'SigningError',
    'ConfigError',

    # Constants
    'ClaimSections',
    'ClaimSectionNames',
    'DEFAULT_SECTION_NAMES',
    'Revisions',

    # Claims
    'Claims',
    'ModuleMetadata',
    'Token',
    'TokenValidation',
    'validate_token',

    # Crypto
    'SigningKeyPair',
    'Ed25519KeyPair',
    'ClaimsCodec',
    'JwtClaimsCodec',

    # Integrity
    'compute_canonical_hash',
    'find_claim_section',
    'extract_claims',
    'embed_claims',
    'sign_buffer_with_claims',
    'days_from_now_to_jwt_time',
]
