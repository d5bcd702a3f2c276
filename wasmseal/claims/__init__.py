"""
Claim records carried by signed modules.

Token validation lives in ``wasmseal.claims.validation``.
"""

from .models import (
    Claims,
    ModuleMetadata,
    Token,
)

__all__ = [
    'Claims',
    'ModuleMetadata',
    'Token',
]
