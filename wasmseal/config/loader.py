"""
Configuration file loading for wasmseal.

Example (wasmseal.yaml):

    sections:
      primary: wasmcloud_jwt
      legacy: jwt
    min_revision: 3
    logging:
      verbose: false
      json: false
      file: /var/log/wasmseal.log
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..constants import ClaimSectionNames, DEFAULT_SECTION_NAMES, Revisions
from ..errors import ConfigError

logger = logging.getLogger(__name__)

TOP_LEVEL_KEYS = frozenset(('sections', 'min_revision', 'logging'))
SECTION_KEYS = frozenset(('primary', 'legacy'))
LOGGING_KEYS = frozenset(('verbose', 'json', 'file'))


@dataclass
class LoggingOptions:
    """Logging settings read from the configuration file."""
    verbose: bool = False
    json: bool = False
    file: Optional[str] = None


@dataclass
class SealConfig:
    """Effective wasmseal configuration."""
    sections: ClaimSectionNames = DEFAULT_SECTION_NAMES
    min_revision: int = Revisions.MIN_HASH_VERIFIED
    log_options: LoggingOptions = field(default_factory=LoggingOptions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'sections': {
                'primary': self.sections.primary,
                'legacy': self.sections.legacy,
            },
            'min_revision': self.min_revision,
            'logging': {
                'verbose': self.log_options.verbose,
                'json': self.log_options.json,
                'file': self.log_options.file,
            },
        }


def _check_keys(data: Dict[str, Any], allowed: frozenset, where: str) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(f"Unknown key(s) in {where}: {', '.join(sorted(unknown))}")


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{where}' must be a mapping")
    return value


def parse_config(data: Optional[Dict[str, Any]]) -> SealConfig:
    """
    Build a SealConfig from parsed YAML data.

    Raises:
        ConfigError: on unknown keys or invalid values
    """
    data = _mapping(data, "configuration")
    _check_keys(data, TOP_LEVEL_KEYS, "configuration")

    section_data = _mapping(data.get('sections'), 'sections')
    _check_keys(section_data, SECTION_KEYS, "sections")
    primary = section_data.get('primary', DEFAULT_SECTION_NAMES.primary)
    legacy = section_data.get('legacy', DEFAULT_SECTION_NAMES.legacy)
    for key, value in (('primary', primary), ('legacy', legacy)):
        if not isinstance(value, str) or not value:
            raise ConfigError(f"sections.{key} must be a non-empty string")

    min_revision = data.get('min_revision', Revisions.MIN_HASH_VERIFIED)
    if isinstance(min_revision, bool) or not isinstance(min_revision, int) or min_revision < 0:
        raise ConfigError("min_revision must be a non-negative integer")

    logging_data = _mapping(data.get('logging'), 'logging')
    _check_keys(logging_data, LOGGING_KEYS, "logging")

    return SealConfig(
        sections=ClaimSectionNames(primary=primary, legacy=legacy),
        min_revision=min_revision,
        log_options=LoggingOptions(
            verbose=bool(logging_data.get('verbose', False)),
            json=bool(logging_data.get('json', False)),
            file=logging_data.get('file'),
        ),
    )


def load_config(path: Optional[Union[str, Path]] = None) -> SealConfig:
    """
    Load configuration from a YAML file, or the defaults when no path is given.

    Raises:
        ConfigError: if the file cannot be read or parsed
    """
    if path is None:
        return SealConfig()

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {path}: {e}") from e

    config = parse_config(data)
    logger.info(f"Loaded configuration from {path}")
    return config
