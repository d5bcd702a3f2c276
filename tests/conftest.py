"""
Pytest configuration and shared fixtures for wasmseal tests.

This module provides keys, codecs and sample modules shared across the
test suite.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add the parent directory to the path for imports
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from wasmseal.claims.models import Claims
from wasmseal.crypto.jwt_codec import ClaimsCodec, JwtClaimsCodec
from wasmseal.crypto.keys import Ed25519KeyPair, SigningKeyPair
from wasmseal.logging_config import set_verbose

import module_factory


# ===========================================================================
# Temporary Directory Fixtures
# ===========================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    tmpdir = tempfile.mkdtemp(prefix="wasmseal_test_")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


# ===========================================================================
# Key and Codec Fixtures
# ===========================================================================

@pytest.fixture
def account_key() -> Ed25519KeyPair:
    """Provide an issuer (account) key pair."""
    return Ed25519KeyPair.from_seed(bytes(range(32)))


@pytest.fixture
def module_key() -> Ed25519KeyPair:
    """Provide a subject (module) key pair."""
    return Ed25519KeyPair.from_seed(bytes(range(32, 64)))


@pytest.fixture
def codec() -> JwtClaimsCodec:
    """Provide a codec with the current hash-verification threshold."""
    return JwtClaimsCodec(min_revision=3)


# ===========================================================================
# Module Fixtures
# ===========================================================================

@pytest.fixture
def sample_module() -> bytes:
    """Provide the dylink sample module."""
    return module_factory.sample_module()


@pytest.fixture
def simple_module() -> bytes:
    """Provide a minimal module with code and data."""
    return module_factory.simple_module()


# ===========================================================================
# Test Doubles
# ===========================================================================

class PlainCodec(ClaimsCodec):
    """Unsigned JSON codec; lets tests drive extraction without crypto."""

    def __init__(self, min_revision: int = 3):
        self.min_revision = min_revision

    def encode(self, claims: Claims, key_pair: SigningKeyPair) -> str:
        return json.dumps(claims.to_dict(), sort_keys=True)

    def decode(self, token: str) -> Claims:
        return Claims.from_dict(json.loads(token))


class BrokenCodec(ClaimsCodec):
    """Codec whose primitives fail with non-wasmseal exceptions."""

    def encode(self, claims: Claims, key_pair: SigningKeyPair) -> str:
        raise RuntimeError("signer offline")

    def decode(self, token: str) -> Claims:
        raise ValueError("decoder exploded")


class FailingKeyPair(SigningKeyPair):
    """Key pair whose signing primitive always fails."""

    def __init__(self, public_key: str = "00" * 32):
        self._public_key = public_key

    def public_key(self) -> str:
        return self._public_key

    def sign(self, data: bytes) -> bytes:
        raise OSError("hardware token removed")


@pytest.fixture
def plain_codec() -> PlainCodec:
    return PlainCodec()


@pytest.fixture
def broken_codec() -> BrokenCodec:
    return BrokenCodec()


@pytest.fixture
def failing_key() -> FailingKeyPair:
    return FailingKeyPair()


# ===========================================================================
# Logging Fixtures
# ===========================================================================

@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger, None, None]:
    """Undo setup_logging() so later tests keep pytest's own handlers."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    set_verbose(False)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


# ===========================================================================
# Markers Registration
# ===========================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "security: Security-specific tests")
