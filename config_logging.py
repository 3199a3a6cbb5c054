#!/usr/bin/env python3
"""
BlockCompare Configuration & Logging Module
===========================================
Centralized configuration, structured logging, and error types.

Version: reads from version.json (module v1.0)
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_SIMILARITY_THRESHOLD = 0.6  # Fuzzy match cut-off (strictly greater than)
DEFAULT_DIFF_TIMEOUT = 0.0          # Seconds per diff, 0 = unlimited (deterministic)
DEFAULT_MAX_UPLOAD_MB = 20          # Max JSON body size in megabytes
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

DEFAULT_MAX_UPLOAD_BYTES = DEFAULT_MAX_UPLOAD_MB * 1024 * 1024


# =============================================================================
# VERSION - Read from version.json (Single Source of Truth)
# =============================================================================
def _load_version():
    """Load version from version.json file."""
    version_file = Path(__file__).parent / 'version.json'
    try:
        with open(version_file, 'r', encoding='utf-8') as f:
            return json.load(f).get('version', '1.0.0')
    except (OSError, ValueError):
        return '1.0.0'  # Fallback version

__version__ = _load_version()
VERSION = __version__
APP_NAME = "BlockCompare"


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() == 'true'


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Application configuration with safe defaults."""

    # Comparison engine
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    diff_timeout: float = DEFAULT_DIFF_TIMEOUT
    strict: bool = False  # Raise on invariant violations instead of degrading

    # Server settings
    host: str = "127.0.0.1"  # Localhost only by default
    port: int = 5060
    debug: bool = False
    max_content_length: int = DEFAULT_MAX_UPLOAD_BYTES

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    def __post_init__(self):
        """Apply environment overrides."""
        if self.log_to_file:
            self.log_dir.mkdir(exist_ok=True)

        # Production never fails loudly
        if os.environ.get('BC_ENV', 'development').lower() == 'production':
            self.debug = False
            self.strict = False
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        return cls(
            similarity_threshold=float(os.environ.get(
                'BC_SIMILARITY_THRESHOLD', str(DEFAULT_SIMILARITY_THRESHOLD))),
            diff_timeout=float(os.environ.get('BC_DIFF_TIMEOUT', str(DEFAULT_DIFF_TIMEOUT))),
            strict=_env_flag('BC_STRICT'),
            host=os.environ.get('BC_HOST', '127.0.0.1'),
            port=int(os.environ.get('BC_PORT', '5060')),
            debug=_env_flag('BC_DEBUG'),
            max_content_length=int(os.environ.get('BC_MAX_UPLOAD', str(DEFAULT_MAX_UPLOAD_BYTES))),
            log_level=os.environ.get('BC_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('BC_LOG_FORMAT', 'json'),
            log_to_file=_env_flag('BC_LOG_TO_FILE'),
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if not 0.0 <= self.similarity_threshold <= 1.0:
            errors.append(f"Similarity threshold must be within [0, 1], got {self.similarity_threshold}")

        if self.diff_timeout < 0:
            errors.append("Diff timeout cannot be negative")

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        if not hasattr(logging, self.log_level.upper()):
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # File handler with rotation
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _emit(self, level: int, message: str, exc_info: bool = False, **kwargs):
        extra = {'correlation_id': self.get_correlation_id(), **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._emit(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._emit(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._emit(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._emit(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise
        duration_ms = (time.time() - start_time) * 1000
        self.info(f"{operation} completed", operation=operation, status='completed',
                  duration_ms=round(duration_ms, 2), **context)


# LogRecord attributes that are not user-supplied extras
_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
    'message', 'taskName',
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


# Loggers are cached per name so handlers are not rebuilt on every call
_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    with _loggers_lock:
        logger = _loggers.get(name)
        if logger is None:
            logger = StructuredLogger(name, get_config())
            _loggers[name] = logger
        return logger


# =============================================================================
# ERROR HANDLING
# =============================================================================

class BlockCompareError(Exception):
    """Base exception for BlockCompare."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(BlockCompareError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class ProcessingError(BlockCompareError):
    """Comparison processing error."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR", status_code=500,
                         details={'stage': stage, **kwargs})


class TreeError(ProcessingError):
    """Document tree could not be traversed."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, stage='extract', **kwargs)
        self.code = "TREE_ERROR"


class InvariantError(ProcessingError):
    """Internal invariant violated (a defect, not bad input)."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, stage='match', **kwargs)
        self.code = "INVARIANT_ERROR"


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator that normalizes unexpected errors into BlockCompareError."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except BlockCompareError:
                raise
            except (FileNotFoundError, PermissionError) as e:
                _logger.error(f"File error in {func.__name__}: {e}", exc_info=True)
                raise ValidationError(str(e), field='path')
            except UnicodeDecodeError as e:
                _logger.error(f"Decode error in {func.__name__}: {e}", exc_info=True)
                raise ValidationError(f"File is not valid UTF-8: {e.reason}", field='encoding')
            except Exception as e:
                _logger.exception(f"Unexpected error in {func.__name__}: {e}")
                raise ProcessingError(f"An unexpected error occurred: {type(e).__name__}")
        return wrapper
    return decorator
