"""
Logging Configuration for wasmseal.

Provides centralized logging configuration with a verbose mode toggle,
feature tags derived from logger names, and text or JSON-lines output.

Usage:
    from wasmseal.logging_config import setup_logging, get_logger

    setup_logging(verbose=True)

    logger = get_logger('wasmseal.integrity.module_claims')
    logger.info("Claims embedded", extra={'extra_data': {'bytes': 1234}})
"""

import sys
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


# =============================================================================
# LOGGING LEVELS
# =============================================================================

VERBOSE = 15
SECURITY = 55


logging.addLevelName(VERBOSE, 'VERBOSE')
logging.addLevelName(SECURITY, 'SECURITY')


# =============================================================================
# THREAD-SAFE CONFIGURATION STATE
# =============================================================================

@dataclass
class LoggingState:
    """Thread-safe logging configuration state."""
    verbose: bool = False
    log_file: Optional[str] = None
    console_enabled: bool = True
    json_format: bool = False
    initialized: bool = False
    _lock: threading.RLock = field(default_factory=threading.RLock)


_state = LoggingState()


# =============================================================================
# CUSTOM FORMATTER
# =============================================================================

class SealFormatter(logging.Formatter):
    """Formatter with color support and structured output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'VERBOSE': '\033[94m',    # Light blue
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33;1m',  # Bold yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[31;1m', # Bold red
        'SECURITY': '\033[35;1m', # Bold magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, json_format: bool = False):
        self.use_colors = use_colors and sys.stderr.isatty()
        self.json_format = json_format
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._format_json(record)
        return self._format_text(record)

    def _format_text(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        level_name = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level_name, '')
            reset = self.COLORS['RESET']
            level_str = f"{color}{level_name:8}{reset}"
        else:
            level_str = f"{level_name:8}"

        feature = self._extract_feature(record.name)
        feature_str = f"[{feature}]"

        msg = record.getMessage()

        extra_str = ""
        if hasattr(record, 'extra_data') and record.extra_data:
            extra_items = [f"{k}={v}" for k, v in record.extra_data.items()]
            extra_str = f" | {', '.join(extra_items)}"

        text = f"{timestamp} {level_str} {feature_str:12} {msg}{extra_str}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text

    def _format_json(self, record: logging.LogRecord) -> str:
        data = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'feature': self._extract_feature(record.name),
        }

        if hasattr(record, 'extra_data') and record.extra_data:
            data['extra'] = record.extra_data

        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)

    def _extract_feature(self, logger_name: str) -> str:
        """Extract feature area from logger name."""
        parts = logger_name.split('.')
        if len(parts) >= 2 and parts[0] == 'wasmseal':
            # wasmseal.integrity.canonical_hash -> integrity
            return parts[1]
        return parts[0] if parts[0] else 'core'


# =============================================================================
# CUSTOM LOGGER CLASS
# =============================================================================

class SealLogger(logging.Logger):
    """Logger with the extra VERBOSE and SECURITY levels."""

    def verbose(self, msg: str, *args, **kwargs):
        """Log at VERBOSE level."""
        if self.isEnabledFor(VERBOSE):
            self._log(VERBOSE, msg, args, **kwargs)

    def security(self, msg: str, *args, **kwargs):
        """Log security-critical events (always logged)."""
        self._log(SECURITY, msg, args, **kwargs)

    def log_with_data(self, level: int, msg: str, data: Dict[str, Any], **kwargs):
        """Log with structured extra data."""
        extra = kwargs.get('extra', {})
        extra['extra_data'] = data
        kwargs['extra'] = extra
        self._log(level, msg, (), **kwargs)


# =============================================================================
# SETUP AND CONFIGURATION
# =============================================================================

def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
) -> None:
    """
    Initialize the logging system.

    Console output goes to stderr so that command output on stdout stays
    machine-readable.

    Args:
        verbose: Enable verbose logging (VERBOSE level)
        log_file: Optional file path for log output
        console: Enable console output
        json_format: Use JSON format for logs
    """
    with _state._lock:
        _state.verbose = verbose
        _state.log_file = log_file
        _state.console_enabled = console
        _state.json_format = json_format

        base_level = VERBOSE if verbose else logging.INFO

        root = logging.getLogger()
        root.setLevel(base_level)

        for handler in root.handlers[:]:
            root.removeHandler(handler)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(base_level)
            console_handler.setFormatter(SealFormatter(
                use_colors=True,
                json_format=json_format
            ))
            root.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(base_level)
            file_handler.setFormatter(SealFormatter(
                use_colors=False,
                json_format=json_format
            ))
            root.addHandler(file_handler)

        _state.initialized = True


def get_logger(name: str) -> SealLogger:
    """
    Get a logger supporting the VERBOSE and SECURITY levels.

    Args:
        name: Logger name (e.g., 'wasmseal.integrity.module_claims')
    """
    logger = logging.getLogger(name)
    if not isinstance(logger, SealLogger):
        # Upgrade to SealLogger if needed
        logging.setLoggerClass(SealLogger)
        logger = logging.getLogger(name)
    return logger


def set_verbose(enabled: bool) -> None:
    """Toggle verbose mode at runtime."""
    with _state._lock:
        _state.verbose = enabled
        level = VERBOSE if enabled else logging.INFO

        root = logging.getLogger()
        root.setLevel(level)

        for handler in root.handlers:
            handler.setLevel(level)


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _state.verbose


def get_logging_state() -> Dict[str, Any]:
    """Get current logging configuration state."""
    with _state._lock:
        return {
            'verbose': _state.verbose,
            'log_file': _state.log_file,
            'console_enabled': _state.console_enabled,
            'json_format': _state.json_format,
            'initialized': _state.initialized,
        }


logging.setLoggerClass(SealLogger)


__all__ = [
    'VERBOSE',
    'SECURITY',
    'setup_logging',
    'get_logger',
    'set_verbose',
    'is_verbose',
    'get_logging_state',
    'SealLogger',
    'SealFormatter',
]
