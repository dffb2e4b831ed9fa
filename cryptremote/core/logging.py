"""
Secure Logging Module
=====================

Logging helpers that keep passwords and key material out of log output.

Security Features:
- Automatic secret/sensitive data filtering on every handler
- Long hex and base64 runs (keys, nonces, raw ciphertext) are redacted
- Optional JSON output for log aggregation
- Optional rotating log file
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Pattern


# Patterns for sensitive data detection
_SENSITIVE_PATTERNS: Final[list[tuple[str, Pattern[str]]]] = [
    ("password", re.compile(r'(?i)(password|passwd|pwd)\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    ("salt", re.compile(r'(?i)\bsalt\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    ("secret", re.compile(r'(?i)(secret|private[_-]?key|data[_-]?key|name[_-]?key|name[_-]?tweak)\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    # Hex encoded material (32+ hex digits: keys, nonces)
    ("hex_secret", re.compile(r'(?i)(?:0x)?[a-f0-9]{32,}')),
    # Base64 encoded material (40+ chars)
    ("base64_secret", re.compile(r'[A-Za-z0-9+/_-]{40,}={0,2}')),
]

_REDACTED_TEXT: Final[str] = "[REDACTED]"

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATE_FORMAT: Final[str] = "%H:%M:%S"


class SecureLogFilter(logging.Filter):
    """
    Log filter that removes sensitive information from log messages.

    Messages and string arguments are scanned for password assignments,
    key names and long encoded blobs, which are replaced with [REDACTED].
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._additional_patterns = additional_patterns or []

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact sensitive information in place.

        Returns:
            Always True (record is kept, just sanitized)
        """
        if record.msg and isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._sanitize(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._sanitize(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True

    def _sanitize(self, text: str) -> str:
        result = text
        for name, pattern in _SENSITIVE_PATTERNS:
            result = pattern.sub(f"{name}={_REDACTED_TEXT}", result)
        for pattern in self._additional_patterns:
            result = pattern.sub(_REDACTED_TEXT, result)
        return result


class StructuredLogFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_secure_logger(
    name: str,
    log_file: Optional[Path] = None,
    level: str = "INFO",
    enable_console: bool = True,
    enable_json: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    fmt: str = _DEFAULT_FORMAT,
    datefmt: str = _DEFAULT_DATE_FORMAT,
) -> logging.Logger:
    """
    Create a logger with automatic secret filtering.

    Calling it again for the same name returns the already configured
    logger untouched.

    Args:
        name: Logger name (typically __name__)
        log_file: Optional path for a rotating log file
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Whether to output to stderr
        enable_json: Whether to use JSON format
        max_file_size: Maximum log file size before rotation
        backup_count: Number of rotated files to keep
        fmt: Text format (ignored for JSON output)
        datefmt: Date format for the text format

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper()))
    secure_filter = SecureLogFilter()

    def _formatter() -> logging.Formatter:
        if enable_json:
            return StructuredLogFormatter()
        return logging.Formatter(fmt, datefmt=datefmt)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(_formatter())
        console_handler.addFilter(secure_filter)
        logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_formatter())
        file_handler.addFilter(secure_filter)
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.propagate = False

    return logger


def configure_logging(
    level: str = "INFO",
    enable_console: bool = True,
    enable_json: bool = False,
    log_file: Optional[Path] = None,
    fmt: str = _DEFAULT_FORMAT,
    datefmt: str = _DEFAULT_DATE_FORMAT,
) -> logging.Logger:
    """
    Configure the package logger ("cryptremote") once at startup.

    Module loggers are children of it and inherit its handlers. Handlers
    from a previous call are closed before the new ones are attached.
    """
    logger = logging.getLogger("cryptremote")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    return get_secure_logger(
        "cryptremote",
        log_file=log_file,
        level=level,
        enable_console=enable_console,
        enable_json=enable_json,
        fmt=fmt,
        datefmt=datefmt,
    )
