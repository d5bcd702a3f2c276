"""
Claims codec - Ed25519-signed JWTs.

Token layout (compact JWT, base64url without padding):

    base64url(header) "." base64url(claims JSON) "." base64url(signature)

The header is always {"alg": "Ed25519", "typ": "jwt"}. The signature covers
the ASCII bytes of the first two segments and is checked against the
claims' issuer public key on decode.
"""

import base64
import binascii
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from ..claims.models import Claims
from ..constants import Revisions
from ..errors import InvalidTokenError, SigningError
from .keys import Ed25519KeyPair, SigningKeyPair

logger = logging.getLogger(__name__)

ALGORITHM = "Ed25519"
TOKEN_TYPE = "jwt"


class ClaimsCodec(ABC):
    """
    Encodes claim records into signed tokens and decodes them back.

    ``min_revision`` is the lowest claim revision whose recorded module hash
    must match the module; older claims predate the hashing scheme.
    """

    min_revision: int = Revisions.MIN_HASH_VERIFIED

    @abstractmethod
    def decode(self, token: str) -> Claims:
        """Decode and verify a token. Raises InvalidTokenError."""

    @abstractmethod
    def encode(self, claims: Claims, key_pair: SigningKeyPair) -> str:
        """Sign ``claims`` with ``key_pair``. Raises SigningError."""


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def _b64decode(segment: str, what: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4))
    except (binascii.Error, ValueError) as e:
        raise InvalidTokenError(f"Token {what} is not valid base64url", reason=str(e)) from e


def _canonical_json(data: Dict[str, Any]) -> bytes:
    return json.dumps(data, sort_keys=True, separators=(',', ':')).encode('utf-8')


def _json_segment(segment: str, what: str) -> Dict[str, Any]:
    raw = _b64decode(segment, what)
    try:
        data = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidTokenError(f"Token {what} is not valid JSON", reason=str(e)) from e
    if not isinstance(data, dict):
        raise InvalidTokenError(f"Token {what} is not a JSON object")
    return data


class JwtClaimsCodec(ClaimsCodec):
    """
    Ed25519 JWT codec.

    Usage:
        codec = JwtClaimsCodec()
        token = codec.encode(claims, account_key)
        claims = codec.decode(token)
    """

    HEADER = {'alg': ALGORITHM, 'typ': TOKEN_TYPE}

    def __init__(self, min_revision: Optional[int] = None):
        if min_revision is not None:
            self.min_revision = min_revision

    def encode(self, claims: Claims, key_pair: SigningKeyPair) -> str:
        public_key = key_pair.public_key()
        if claims.issuer != public_key:
            raise SigningError(
                f"Claims issuer {claims.issuer} does not match signing key {public_key}"
            )

        signing_input = (
            f"{_b64encode(_canonical_json(self.HEADER))}."
            f"{_b64encode(_canonical_json(claims.to_dict()))}"
        )
        try:
            signature = key_pair.sign(signing_input.encode('ascii'))
        except Exception as e:
            raise SigningError(f"Failed to sign claims: {e}") from e

        return f"{signing_input}.{_b64encode(signature)}"

    def decode_unverified(self, token: str) -> Tuple[Claims, bool]:
        """
        Decode a token and report whether its signature is valid.

        Structural problems still raise InvalidTokenError.
        """
        parts = token.strip().split('.')
        if len(parts) != 3:
            raise InvalidTokenError(f"Token has {len(parts)} segments, expected 3")
        header_segment, payload_segment, signature_segment = parts

        header = _json_segment(header_segment, "header")
        if header.get('alg') != ALGORITHM:
            raise InvalidTokenError(f"Unsupported token algorithm {header.get('alg')!r}")

        payload = _json_segment(payload_segment, "payload")
        claims = Claims.from_dict(payload)

        signature = _b64decode(signature_segment, "signature")
        signing_input = f"{header_segment}.{payload_segment}".encode('ascii')
        signature_valid = Ed25519KeyPair.verify(claims.issuer, signing_input, signature)
        return claims, signature_valid

    def decode(self, token: str) -> Claims:
        claims, signature_valid = self.decode_unverified(token)
        if not signature_valid:
            raise InvalidTokenError(
                f"Token signature does not verify against issuer {claims.issuer}",
                reason="bad signature",
            )
        return claims
