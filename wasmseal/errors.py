"""
wasmseal Exceptions

Error kinds surfaced by the scanner, hasher and claim embedder/extractor.
Every failure is a distinct, inspectable type so a host can decide policy
(reject, log, quarantine) without the library deciding for it.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Inspectable category attached to every wasmseal error."""
    MALFORMED_CONTAINER = "malformed_container"
    ENCODING = "encoding"
    INVALID_TOKEN = "invalid_token"
    INVALID_ALGORITHM = "invalid_algorithm"
    INVALID_MODULE_HASH = "invalid_module_hash"
    SIGNING = "signing"
    CONFIG = "config"


class WasmSealError(Exception):
    """Base exception for all wasmseal errors."""

    kind: ErrorKind = ErrorKind.INVALID_TOKEN

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason or message


class MalformedContainerError(WasmSealError):
    """Raised when the byte stream does not parse as a WebAssembly module."""

    kind = ErrorKind.MALFORMED_CONTAINER

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class ClaimEncodingError(WasmSealError):
    """Raised when a claim section's payload is not valid UTF-8 text."""

    kind = ErrorKind.ENCODING


class InvalidTokenError(WasmSealError):
    """Raised when the claims codec rejects a token."""

    kind = ErrorKind.INVALID_TOKEN


class InvalidAlgorithmError(WasmSealError):
    """Raised when a decoded claim carries no integrity-hash metadata."""

    kind = ErrorKind.INVALID_ALGORITHM


class InvalidModuleHashError(WasmSealError):
    """Raised when the recorded module hash does not match the module."""

    kind = ErrorKind.INVALID_MODULE_HASH

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Module hash mismatch: claim records {expected}, module hashes to {actual}",
            reason="tamper detected",
        )
        self.expected = expected
        self.actual = actual


class SigningError(WasmSealError):
    """Raised when the signing primitive fails while embedding claims."""

    kind = ErrorKind.SIGNING


class ConfigError(WasmSealError):
    """Raised for invalid configuration files or values."""

    kind = ErrorKind.CONFIG
