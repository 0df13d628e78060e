"""System logger for operational events.

This module provides a singleton system logger for operational events
(e.g., a token endpoint returning an unexpected token_type, a rejected
authorization callback, secrets uploaded to the secret store).

Logging strategy:
- Console (stderr): INFO, WARNING, ERROR, CRITICAL
- File (optional JSONL): Only issues (WARNING, ERROR, CRITICAL)

The file handler is configured separately via configure_system_logger_file()
when the caller has a log path (e.g. the CLI --log-file option).

Tokens, codes and secret values are never logged - only their presence,
names, or counts.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_logger",
]

import logging
import sys
from pathlib import Path

from appauth.constants import APP_NAME
from appauth.utils.logging.iso_formatter import ISO8601Formatter


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human-readable console output.

        Args:
            record: The log record to format.

        Returns:
            str: Formatted log message with level prefix.
        """
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


# Module-level singleton logger
_system_logger: logging.Logger | None = None
_file_handler_configured: bool = False


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with stderr handler only.
    File handler is added later via configure_system_logger_file().

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> from appauth.telemetry.system.system_logger import get_system_logger
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "unexpected_token_type", "token_type": "mac"})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.INFO)
    _system_logger.propagate = False

    # Close and remove any existing handlers to avoid duplicates and resource leaks
    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.INFO)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger


def configure_system_logger_file(log_path: Path) -> None:
    """Add a JSONL file handler (WARNING and above) to the system logger.

    Only the first call has an effect.

    Args:
        log_path: Path to the log file. Parent directories are created
            with owner-only permissions.

    Raises:
        OSError: If the log file cannot be opened.
    """
    global _file_handler_configured

    if _file_handler_configured:
        return

    logger = get_system_logger()

    log_path.parent.mkdir(parents=True, exist_ok=True)
    if sys.platform != "win32":
        try:
            log_path.parent.chmod(0o700)
        except OSError:
            pass  # Permission changes might fail on some systems

    file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)

    _file_handler_configured = True
