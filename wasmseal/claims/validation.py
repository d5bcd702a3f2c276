"""
Token validation report.

Summarizes whether a signed claim token can be used right now: signature
validity, expiry and not-before bounds, with human-readable times for
display. Nothing here raises for an expired or not-yet-valid token; that is
a policy decision for the host.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..crypto.jwt_codec import JwtClaimsCodec
from ..utils.time_helpers import since_the_epoch, stamp_to_human


@dataclass
class TokenValidation:
    """Result of validating a claim token."""
    signature_valid: bool
    expired: bool
    expires_human: str
    cannot_use_yet: bool
    not_before_human: str

    @property
    def is_usable(self) -> bool:
        return self.signature_valid and not self.expired and not self.cannot_use_yet

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'signature_valid': self.signature_valid,
            'expired': self.expired,
            'expires_human': self.expires_human,
            'cannot_use_yet': self.cannot_use_yet,
            'not_before_human': self.not_before_human,
            'is_usable': self.is_usable,
        }


def validate_token(
    token: str,
    codec: Optional[JwtClaimsCodec] = None,
    now: Optional[int] = None,
) -> TokenValidation:
    """
    Validate a token's signature and temporal bounds.

    Raises:
        InvalidTokenError: if the token is structurally malformed
    """
    codec = codec or JwtClaimsCodec()
    if now is None:
        now = since_the_epoch()

    claims, signature_valid = codec.decode_unverified(token)

    expired = claims.expires is not None and claims.expires < now
    cannot_use_yet = claims.not_before is not None and claims.not_before > now

    return TokenValidation(
        signature_valid=signature_valid,
        expired=expired,
        expires_human=stamp_to_human(claims.expires, now=now, unset="never"),
        cannot_use_yet=cannot_use_yet,
        not_before_human=stamp_to_human(claims.not_before, now=now, unset="immediately"),
    )
