"""
Logging infrastructure for blobdelta.

Structured (JSON) or text log output with storage credentials redacted, and a
correlation id that ties the listing requests of one enumeration together.
"""

import logging
import logging.handlers
import json
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from .config_manager import LoggingConfig

# Correlation id of the enumeration currently issuing listing requests
correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

REDACTED = "***REDACTED***"

# Credentials that can appear in container URLs and connection strings
REDACTIONS = [
    (re.compile(r'(Authorization:\s+)(?:Bearer\s+|SharedKey\s+)?\S+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(AccountKey=)[^;]+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(SharedAccessSignature=)[^;&]+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(sig=)[^;&\s]+', re.IGNORECASE), r'\1' + REDACTED),
]

_SIZE_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*(GB|MB|KB|B)?$')
_SIZE_UNITS = {None: 1, 'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


def redact(text: str) -> str:
    """Replace storage credentials in ``text``."""
    for pattern, replacement in REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current context, if any."""
    return correlation_id.get()


@contextmanager
def correlation_scope(corr_id: str) -> Iterator[str]:
    """Set the correlation id for the duration of the block."""
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


class SensitiveDataFilter(logging.Filter):
    """Redacts storage credentials from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        if corr_id := get_correlation_id():
            log_data["correlation_id"] = corr_id
        if context := getattr(record, "context", None):
            log_data["context"] = context
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines, with context appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        extras = {}
        if corr_id := get_correlation_id():
            extras["correlation_id"] = corr_id
        extras.update(getattr(record, "context", None) or {})

        if extras:
            line += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        return line


def _attach(root_logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure the root logger for blobdelta.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        log_file: Optional path of a rotating log file, written in addition to stdout
        rotation_size: Size at which the log file rotates (e.g., "10MB")
        rotation_count: Number of rotated log files to keep
        module_levels: Per-logger levels, e.g. {"blobdelta.blob.enumerable": "DEBUG"}
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    formatter = JSONFormatter() if format_type == "json" else TextFormatter()
    _attach(root_logger, logging.StreamHandler(sys.stdout), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=_parse_size(rotation_size),
            backupCount=rotation_count,
            encoding='utf-8'
        )
        _attach(root_logger, file_handler, formatter)

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(getattr(logging, module_level.upper()))

    root_logger.info(
        f"Logging configured: level={level}, format={format_type}, file={log_file or '-'}"
    )


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Configure logging from the ``logging`` section of a BlobDeltaConfig."""
    level = config.level.value if hasattr(config.level, "value") else config.level
    setup_logging(
        level=level,
        format_type=config.format,
        log_file=config.file,
        rotation_size=config.rotation_size,
        rotation_count=config.rotation_count,
        module_levels=config.module_levels,
    )


def _parse_size(size_str: str) -> int:
    """Parse "10MB", "512KB", "1.5GB" or a plain byte count."""
    match = _SIZE_PATTERN.match(size_str.upper().strip())
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log ``message`` with ``context`` attached to the record."""
    extra = {"context": context} if context else {}
    logger.log(level, message, extra=extra)
