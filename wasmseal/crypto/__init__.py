"""
Cryptographic collaborators for wasmseal: key pairs and the claims codec.
"""

from .keys import (
    SigningKeyPair,
    Ed25519KeyPair,
)

from .jwt_codec import (
    ClaimsCodec,
    JwtClaimsCodec,
)

__all__ = [
    'SigningKeyPair',
    'Ed25519KeyPair',
    'ClaimsCodec',
    'JwtClaimsCodec',
]
