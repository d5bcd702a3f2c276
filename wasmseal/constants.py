"""
Centralized Constants Module for wasmseal.

Reserved claim-section names, claim revisions and time constants live here
so the canonical hasher and the claim extractor always agree on them. A
disagreement between the two would silently break tamper detection.

Usage:
    from wasmseal.constants import ClaimSections, Revisions, DEFAULT_SECTION_NAMES

    if name in DEFAULT_SECTION_NAMES:
        ...
"""

import os
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, TypeVar

logger = logging.getLogger(__name__)


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDE UTILITIES
# =============================================================================

T = TypeVar('T')

ENV_PREFIX = "WASMSEAL_"


def _env_override(
    env_var: str,
    default: T,
    converter: Callable[[str], T] = str,
    validator: Optional[Callable[[T], bool]] = None,
    min_value: Optional[T] = None,
    max_value: Optional[T] = None,
) -> T:
    """Get a configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with WASMSEAL_)
        default: Default value if env var not set
        converter: Function to convert string to target type
        validator: Optional validation function
        min_value: Optional minimum allowed value
        max_value: Optional maximum allowed value

    Returns:
        Configured value (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    try:
        converted = converter(env_value)

        if min_value is not None and converted < min_value:
            logger.warning(
                f"SECURITY: {full_env_var}={env_value} below minimum {min_value}, using default"
            )
            return default
        if max_value is not None and converted > max_value:
            logger.warning(
                f"SECURITY: {full_env_var}={env_value} above maximum {max_value}, using default"
            )
            return default

        if validator is not None and not validator(converted):
            logger.warning(
                f"SECURITY: {full_env_var}={env_value} failed validation, using default"
            )
            return default

        logger.info(f"Using {full_env_var}={converted} (override)")
        return converted

    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid value for {full_env_var}: {e}, using default")
        return default


# =============================================================================
# CLAIM SECTION CONSTANTS
# =============================================================================

@dataclass(frozen=True)
class ClaimSections:
    """
    Custom-section names that carry an embedded claim token.

    These are the only wire-format constants owned by wasmseal. New tokens
    are always written under PRIMARY; LEGACY is still recognized on read.
    """
    PRIMARY: str = "wasmcloud_jwt"
    LEGACY: str = "jwt"


@dataclass(frozen=True)
class Revisions:
    """
    Claim revision markers.

    Claims whose revision is below MIN_HASH_VERIFIED predate the current
    hashing scheme; a module hash mismatch on such a claim is accepted.
    """
    CURRENT: int = 3
    MIN_HASH_VERIFIED: int = _env_override(
        "MIN_REVISION", 3, int, min_value=0, max_value=3,
    )


@dataclass(frozen=True)
class TimeConstants:
    """Time conversion constants."""
    SECS_PER_MINUTE: int = 60
    SECS_PER_HOUR: int = 3600
    SECS_PER_DAY: int = 86400


# =============================================================================
# INJECTABLE SECTION NAME CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ClaimSectionNames:
    """
    Reserved section names injected into the hasher, extractor and embedder.

    The embedder writes ``primary``; the hasher skips and the extractor
    matches every name in ``reserved``.
    """
    primary: str = ClaimSections.PRIMARY
    legacy: str = ClaimSections.LEGACY

    @property
    def reserved(self) -> FrozenSet[str]:
        return frozenset((self.primary, self.legacy))

    def __contains__(self, name: object) -> bool:
        return name in self.reserved


DEFAULT_SECTION_NAMES = ClaimSectionNames()
