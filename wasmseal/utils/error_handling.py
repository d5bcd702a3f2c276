"""
Error Handling Utilities for wasmseal

Library code raises typed errors from wasmseal.errors; callers at the edge
(sealctl, host integrations) use these helpers to report them with
consistent, detailed logging:
1. Error categorization and severity levels
2. Stack trace preservation
3. Context attached to every report

USAGE:
    from wasmseal.utils.error_handling import handle_error, ErrorCategory

    try:
        token = extract_claims(module_bytes)
    except WasmSealError as e:
        handle_error(e, "extract_claims", ErrorCategory.SECURITY)
"""

import functools
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from ..errors import ErrorKind, WasmSealError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Tamper detection, bad signatures
    SECURITY = "security"

    # Module container parsing
    CONTAINER = "container"

    # Key pairs and token signing
    CRYPTO = "crypto"

    # Configuration errors
    CONFIG = "configuration"

    # File system errors
    FILESYSTEM = "filesystem"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    # Module integrity at risk
    CRITICAL = "critical"


# Category implied by a wasmseal error kind
KIND_CATEGORIES = {
    ErrorKind.MALFORMED_CONTAINER: ErrorCategory.CONTAINER,
    ErrorKind.ENCODING: ErrorCategory.CONTAINER,
    ErrorKind.INVALID_TOKEN: ErrorCategory.SECURITY,
    ErrorKind.INVALID_ALGORITHM: ErrorCategory.SECURITY,
    ErrorKind.INVALID_MODULE_HASH: ErrorCategory.SECURITY,
    ErrorKind.SIGNING: ErrorCategory.CRYPTO,
    ErrorKind.CONFIG: ErrorCategory.CONFIG,
}


@dataclass
class ErrorContext:
    """Detailed context information for an error."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    stack_trace: str = ""
    additional_context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.stack_trace:
            self.stack_trace = ''.join(traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            ))

    @property
    def kind(self) -> Optional[ErrorKind]:
        if isinstance(self.error, WasmSealError):
            return self.error.kind
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            'error_type': type(self.error).__name__,
            'error_message': str(self.error),
            'kind': self.kind.value if self.kind else None,
            'category': self.category.value,
            'severity': self.severity.value,
            'operation': self.operation,
            'timestamp': self.timestamp,
            'stack_trace': self.stack_trace,
            'additional_context': self.additional_context,
        }

    def format_log_message(self, include_trace: bool = False) -> str:
        """Format a detailed log message."""
        lines = [
            f"ERROR [{self.severity.value.upper()}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
        ]

        if self.additional_context:
            lines.append("  Context:")
            for key, value in self.additional_context.items():
                lines.append(f"    {key}: {value}")

        if include_trace:
            lines.append("  Stack Trace:")
            for line in self.stack_trace.split('\n'):
                if line.strip():
                    lines.append(f"    {line}")

        return '\n'.join(lines)


def categorize(error: Exception) -> ErrorCategory:
    """Pick a category from the error type."""
    if isinstance(error, WasmSealError):
        return KIND_CATEGORIES.get(error.kind, ErrorCategory.UNKNOWN)
    if isinstance(error, OSError):
        return ErrorCategory.FILESYSTEM
    return ErrorCategory.UNKNOWN


def determine_severity(
    error: Exception,
    category: ErrorCategory,
) -> ErrorSeverity:
    """
    Determine the severity level for an error based on type and category.
    """
    if isinstance(error, WasmSealError) and error.kind == ErrorKind.INVALID_MODULE_HASH:
        return ErrorSeverity.CRITICAL

    if category == ErrorCategory.SECURITY:
        return ErrorSeverity.ERROR

    if isinstance(error, FileNotFoundError):
        return ErrorSeverity.WARNING

    return ErrorSeverity.ERROR


def handle_error(
    error: Exception,
    operation: str,
    category: Optional[ErrorCategory] = None,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
) -> ErrorContext:
    """
    Handle an error with comprehensive logging.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error (derived from the error if not provided)
        severity: Severity level (auto-determined if not provided)
        additional_context: Additional context information
        reraise: Whether to re-raise the exception after handling

    Returns:
        ErrorContext with full error details
    """
    if category is None:
        category = categorize(error)
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )

    log_level_map = {
        ErrorSeverity.WARNING: logging.WARNING,
        ErrorSeverity.ERROR: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL,
    }
    log_level = log_level_map.get(severity, logging.ERROR)

    # Unexpected exceptions get their stack trace in the log
    logger.log(
        log_level,
        context.format_log_message(include_trace=not isinstance(error, WasmSealError)),
    )

    if reraise:
        raise error

    return context


def with_error_handling(
    operation: Optional[str] = None,
    category: Optional[ErrorCategory] = None,
    default_return: Any = None,
    handled: tuple = (WasmSealError, OSError),
):
    """
    Decorator that reports ``handled`` exceptions and returns ``default_return``.

    Anything outside ``handled`` propagates untouched.

    Usage:
        @with_error_handling(operation="sign", default_return=1)
        def cmd_sign(args):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except handled as e:
                handle_error(
                    e,
                    operation or func.__name__,
                    category=category,
                )
                return default_return

        return wrapper
    return decorator


def log_security_error(
    error: Exception,
    operation: str,
    **context,
) -> ErrorContext:
    """Log a security-related error with CRITICAL severity."""
    return handle_error(
        error,
        operation,
        category=ErrorCategory.SECURITY,
        severity=ErrorSeverity.CRITICAL,
        additional_context=context,
    )
