"""
Module Claims - embed and extract signed claims in WebAssembly modules.

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                          EMBED                                  │
    │  module bytes ──► canonical hash ──► claims.metadata.hash       │
    │                                          │                      │
    │                                          ▼                      │
    │                           codec.encode(claims, account key)     │
    │                                          │                      │
    │                                          ▼                      │
    │  module bytes - old claim sections + custom section             │
    │                                       "wasmcloud_jwt"           │
    ├─────────────────────────────────────────────────────────────────┤
    │                          EXTRACT                                │
    │  first custom section named "wasmcloud_jwt" or "jwt"            │
    │     │  none ──► None (module is unsigned)                       │
    │     ▼                                                           │
    │  UTF-8 text ──► codec.decode ──► claims                         │
    │                                    │                            │
    │                                    ▼                            │
    │  recorded hash == canonical hash ? ──► Token                    │
    │     mismatch, revision >= minimum  ──► InvalidModuleHashError   │
    │     mismatch, older revision       ──► Token (legacy)           │
    └─────────────────────────────────────────────────────────────────┘

Because claim sections are excluded from the canonical hash, re-signing a
module never changes its hash, and a claim verifies against the module it
was embedded in.

Legacy carve-out: claims whose revision predates the codec's
``min_revision`` are accepted even when their recorded hash does not match.
Those tokens were produced by an earlier hashing scheme, so a mismatch
cannot distinguish tampering from a scheme change. This keeps old signed
modules loadable; hosts that want to refuse them can check
``token.claims.revision`` themselves.
"""

import logging
from typing import List, Optional

from ..claims.models import Claims, Token
from ..constants import ClaimSectionNames, DEFAULT_SECTION_NAMES
from ..crypto.jwt_codec import ClaimsCodec, JwtClaimsCodec
from ..crypto.keys import SigningKeyPair
from ..errors import (
    ClaimEncodingError,
    InvalidAlgorithmError,
    InvalidModuleHashError,
    InvalidTokenError,
    SigningError,
)
from ..logging_config import get_logger
from ..utils.time_helpers import days_from_now_to_jwt_time
from ..wasm.binary_reader import BytesLike
from ..wasm.scanner import CustomSection, iter_custom_sections
from ..wasm.writer import strip_custom_sections, write_custom_section
from .canonical_hash import compute_canonical_hash

logger = get_logger(__name__)


def find_claim_section(
    module_bytes: BytesLike,
    sections: Optional[ClaimSectionNames] = None,
) -> Optional[CustomSection]:
    """Return the first custom section with a reserved claim name, in scan order."""
    sections = sections or DEFAULT_SECTION_NAMES
    for section in iter_custom_sections(module_bytes):
        if section.name in sections:
            return section
    return None


def extract_claims(
    module_bytes: BytesLike,
    codec: Optional[ClaimsCodec] = None,
    sections: Optional[ClaimSectionNames] = None,
) -> Optional[Token]:
    """
    Extract and verify the claims embedded in a module.

    Returns None when the module carries no claim section. Otherwise returns
    a Token with the raw JWT and decoded claims, once the recorded module
    hash has been checked against the module.

    Raises:
        MalformedContainerError: the module cannot be scanned
        ClaimEncodingError: the claim section is not UTF-8 text
        InvalidTokenError: the codec rejected the token
        InvalidAlgorithmError: the claims record no module hash
        InvalidModuleHashError: the module was modified after signing
    """
    codec = codec or JwtClaimsCodec()
    sections = sections or DEFAULT_SECTION_NAMES

    section = find_claim_section(module_bytes, sections)
    if section is None:
        logger.verbose("No claim section present")
        return None

    try:
        jwt = section.data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ClaimEncodingError(
            f"Claim section '{section.name}' is not valid UTF-8", reason=str(e)
        ) from e

    try:
        claims = codec.decode(jwt)
    except InvalidTokenError:
        raise
    except Exception as e:
        raise InvalidTokenError(f"Failed to decode claim token: {e}") from e

    if claims.metadata is None or not claims.metadata.module_hash:
        raise InvalidAlgorithmError(
            "Claim token records no module hash; module cannot be verified"
        )

    module_hash = compute_canonical_hash(module_bytes, sections)
    recorded_hash = claims.metadata.module_hash
    if recorded_hash != module_hash:
        revision = claims.revision or 0
        if revision >= codec.min_revision:
            logger.security(
                f"Module hash mismatch for subject {claims.subject}",
                extra={'extra_data': {'recorded': recorded_hash, 'computed': module_hash}},
            )
            raise InvalidModuleHashError(expected=recorded_hash, actual=module_hash)
        logger.warning(
            f"Accepting legacy claim (revision {revision} < {codec.min_revision}) "
            f"for subject {claims.subject} despite module hash mismatch"
        )

    logger.verbose(f"Extracted claims for subject {claims.subject} from '{section.name}'")
    return Token(jwt=jwt, claims=claims)


def embed_claims(
    module_bytes: BytesLike,
    claims: Claims,
    key_pair: SigningKeyPair,
    codec: Optional[ClaimsCodec] = None,
    sections: Optional[ClaimSectionNames] = None,
) -> bytes:
    """
    Sign ``claims`` and embed them in a copy of the module.

    The module hash is computed from the unmodified input and written into
    a copy of the claims; the caller's record is left untouched. Any existing
    claim sections are replaced by a single section under the primary name.

    Raises:
        MalformedContainerError: the module cannot be scanned
        SigningError: the codec failed to sign the claims
    """
    codec = codec or JwtClaimsCodec()
    sections = sections or DEFAULT_SECTION_NAMES

    module_hash = compute_canonical_hash(module_bytes, sections)
    signed_claims = claims.with_module_hash(module_hash)

    try:
        encoded = codec.encode(signed_claims, key_pair)
    except SigningError:
        raise
    except Exception as e:
        raise SigningError(f"Failed to sign claims: {e}") from e

    if find_claim_section(module_bytes, sections) is not None:
        logger.info("Replacing existing claim section(s)")
        module_bytes = strip_custom_sections(module_bytes, sections.reserved)

    output = write_custom_section(module_bytes, sections.primary, encoded.encode('utf-8'))
    logger.log_with_data(
        logging.INFO,
        f"Embedded claims for subject {signed_claims.subject}",
        {'hash': module_hash, 'bytes': len(output)},
    )
    return output


def sign_buffer_with_claims(
    name: str,
    module_bytes: BytesLike,
    module_key: SigningKeyPair,
    account_key: SigningKeyPair,
    expires_in_days: Optional[int] = None,
    not_before_days: Optional[int] = None,
    caps: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    provider: bool = False,
    rev: Optional[int] = None,
    ver: Optional[str] = None,
    call_alias: Optional[str] = None,
    codec: Optional[ClaimsCodec] = None,
    sections: Optional[ClaimSectionNames] = None,
) -> bytes:
    """
    Build module claims and embed them, signed by the account key.

    The account key is the issuer and the module key the subject. Day
    offsets are converted to absolute timestamps from the current time;
    None means no bound.
    """
    claims = Claims.with_dates(
        name,
        account_key.public_key(),
        module_key.public_key(),
        caps=list(caps) if caps is not None else [],
        tags=list(tags) if tags is not None else [],
        not_before=days_from_now_to_jwt_time(not_before_days),
        expires=days_from_now_to_jwt_time(expires_in_days),
        provider=provider,
        rev=rev,
        ver=ver,
        call_alias=call_alias,
    )
    return embed_claims(module_bytes, claims, account_key, codec=codec, sections=sections)
