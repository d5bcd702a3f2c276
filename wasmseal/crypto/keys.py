"""
Key pairs used to sign claim tokens.

The integrity layer only needs two things from a key pair: its public key
as text, and a detached signature over some bytes. SigningKeyPair states
that contract; Ed25519KeyPair implements it with PyNaCl.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

logger = logging.getLogger(__name__)

SEED_SIZE = 32
PUBLIC_KEY_HEX_SIZE = 64


class SigningKeyPair(ABC):
    """Key-pair capability consumed by the claims codec."""

    @abstractmethod
    def public_key(self) -> str:
        """Public key as text, as it appears in claim issuer/subject fields."""

    @abstractmethod
    def sign(self, data: bytes) -> bytes:
        """Return a detached signature over ``data``."""


class Ed25519KeyPair(SigningKeyPair):
    """
    Ed25519 key pair backed by PyNaCl.

    Public keys render as the lowercase hex of the 32-byte verify key.

    Usage:
        account = Ed25519KeyPair.generate()
        signature = account.sign(b'payload')
        assert Ed25519KeyPair.verify(account.public_key(), b'payload', signature)
    """

    def __init__(self, signing_key: SigningKey):
        self._signing_key = signing_key
        self._public_key = bytes(signing_key.verify_key).hex()

    @classmethod
    def generate(cls) -> 'Ed25519KeyPair':
        """Generate a new random key pair."""
        key_pair = cls(SigningKey.generate())
        logger.info("Generated new signing keypair")
        return key_pair

    @classmethod
    def from_seed(cls, seed: bytes) -> 'Ed25519KeyPair':
        """Create from a 32-byte seed."""
        if len(seed) != SEED_SIZE:
            raise ValueError(f"Ed25519 seed must be {SEED_SIZE} bytes, got {len(seed)}")
        return cls(SigningKey(seed))

    @classmethod
    def from_file(cls, key_path: Union[str, Path]) -> 'Ed25519KeyPair':
        """Load a seed file; raw 32-byte and hex-encoded seeds are accepted."""
        with open(key_path, 'rb') as f:
            key_data = f.read()
        stripped = key_data.strip()
        if len(stripped) == SEED_SIZE * 2:
            try:
                key_data = bytes.fromhex(stripped.decode('ascii'))
            except ValueError as e:
                raise ValueError(f"Key file {key_path} is not a valid hex seed: {e}") from e
        key_pair = cls.from_seed(key_data)
        logger.debug(f"Loaded signing key {key_pair.public_key()[:16]}... from {key_path}")
        return key_pair

    @property
    def seed(self) -> bytes:
        return bytes(self._signing_key)

    def public_key(self) -> str:
        return self._public_key

    def sign(self, data: bytes) -> bytes:
        return bytes(self._signing_key.sign(data).signature)

    def save(self, key_path: Union[str, Path]) -> None:
        """Write the hex seed, readable by the owner only."""
        with open(key_path, 'w') as f:
            f.write(self.seed.hex())
        os.chmod(key_path, 0o600)

    @staticmethod
    def verify(public_key: str, data: bytes, signature: bytes) -> bool:
        """Check a detached signature against a hex public key."""
        try:
            VerifyKey(bytes.fromhex(public_key)).verify(data, signature)
            return True
        except (BadSignatureError, CryptoError, ValueError, TypeError) as e:
            logger.debug(f"Signature verification failed: {e}")
            return False

    def __repr__(self) -> str:
        return f"Ed25519KeyPair(public_key={self._public_key!r})"
