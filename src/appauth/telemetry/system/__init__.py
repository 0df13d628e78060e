"""System operational logging.

Provides the system logger for operational events (unexpected token types,
rejected authorization callbacks, secrets provisioning).
"""

from appauth.telemetry.system.system_logger import (
    ConsoleFormatter,
    configure_system_logger_file,
    get_system_logger,
)

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_logger",
]
