"""
Tests for the Constants module.

Tests centralized configuration values and constants.
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wasmseal.constants import (
    ClaimSections,
    ClaimSectionNames,
    DEFAULT_SECTION_NAMES,
    Revisions,
    TimeConstants,
    _env_override,
)


# ===========================================================================
# Claim Section Constants Tests
# ===========================================================================

class TestClaimSections:
    """Tests for ClaimSections dataclass."""

    def test_names(self):
        """Section names are part of the wire format."""
        assert ClaimSections.PRIMARY == "wasmcloud_jwt"
        assert ClaimSections.LEGACY == "jwt"

    def test_names_distinct(self):
        assert ClaimSections.PRIMARY != ClaimSections.LEGACY


class TestClaimSectionNames:
    """Tests for the injectable section name set."""

    def test_defaults(self):
        assert DEFAULT_SECTION_NAMES.primary == ClaimSections.PRIMARY
        assert DEFAULT_SECTION_NAMES.legacy == ClaimSections.LEGACY

    def test_reserved_contains_both(self):
        assert DEFAULT_SECTION_NAMES.reserved == frozenset(("wasmcloud_jwt", "jwt"))

    def test_membership(self):
        assert "jwt" in DEFAULT_SECTION_NAMES
        assert "wasmcloud_jwt" in DEFAULT_SECTION_NAMES
        assert "name" not in DEFAULT_SECTION_NAMES
        assert "JWT" not in DEFAULT_SECTION_NAMES

    def test_custom_names(self):
        names = ClaimSectionNames(primary="seal", legacy="seal_v0")
        assert "seal" in names
        assert "jwt" not in names

    def test_immutable(self):
        with pytest.raises(Exception):
            DEFAULT_SECTION_NAMES.primary = "other"


# ===========================================================================
# Revision and Time Constants Tests
# ===========================================================================

class TestRevisions:
    """Tests for Revisions dataclass."""

    def test_current_is_hash_verified(self):
        """New claims must never fall under the legacy carve-out."""
        assert Revisions.CURRENT >= Revisions.MIN_HASH_VERIFIED

    def test_threshold_in_range(self):
        assert 0 <= Revisions.MIN_HASH_VERIFIED <= Revisions.CURRENT


class TestTimeConstants:
    """Tests for TimeConstants dataclass."""

    def test_units(self):
        assert TimeConstants.SECS_PER_HOUR == 60 * TimeConstants.SECS_PER_MINUTE
        assert TimeConstants.SECS_PER_DAY == 24 * TimeConstants.SECS_PER_HOUR


# ===========================================================================
# Environment Override Tests
# ===========================================================================

class TestEnvOverride:
    """Tests for _env_override."""

    def test_unset_returns_default(self, monkeypatch):
        monkeypatch.delenv("WASMSEAL_TEST_VALUE", raising=False)
        assert _env_override("TEST_VALUE", 3, int) == 3

    def test_valid_override(self, monkeypatch):
        monkeypatch.setenv("WASMSEAL_TEST_VALUE", "1")
        assert _env_override("TEST_VALUE", 3, int, min_value=0, max_value=3) == 1

    def test_out_of_range_uses_default(self, monkeypatch):
        monkeypatch.setenv("WASMSEAL_TEST_VALUE", "9")
        assert _env_override("TEST_VALUE", 3, int, min_value=0, max_value=3) == 3
        monkeypatch.setenv("WASMSEAL_TEST_VALUE", "-1")
        assert _env_override("TEST_VALUE", 3, int, min_value=0, max_value=3) == 3

    def test_unparseable_uses_default(self, monkeypatch):
        monkeypatch.setenv("WASMSEAL_TEST_VALUE", "three")
        assert _env_override("TEST_VALUE", 3, int) == 3

    def test_validator(self, monkeypatch):
        monkeypatch.setenv("WASMSEAL_TEST_VALUE", "2")
        assert _env_override("TEST_VALUE", 3, int, validator=lambda v: v % 2 == 1) == 3
