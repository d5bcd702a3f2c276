"""
Utility modules for wasmseal.

Provides:
- Error reporting with verbose logging
- Time helpers for claim temporal bounds
"""

from .error_handling import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    categorize,
    determine_severity,
    handle_error,
    with_error_handling,
    log_security_error,
)

from .time_helpers import (
    since_the_epoch,
    days_from_now_to_jwt_time,
    humanize_duration,
    stamp_to_human,
)

__all__ = [
    # Error handling
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'categorize',
    'determine_severity',
    'handle_error',
    'with_error_handling',
    'log_security_error',

    # Time
    'since_the_epoch',
    'days_from_now_to_jwt_time',
    'humanize_duration',
    'stamp_to_human',
]
