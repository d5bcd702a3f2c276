"""
Configuration for wasmseal.
"""

from .loader import (
    LoggingOptions,
    SealConfig,
    parse_config,
    load_config,
)

__all__ = [
    'LoggingOptions',
    'SealConfig',
    'parse_config',
    'load_config',
]
