"""Log formatting for JSONL output with ISO 8601 timestamps."""

from __future__ import annotations

__all__ = ["ISO8601Formatter"]

import json
import logging
from datetime import datetime, timezone


class ISO8601Formatter(logging.Formatter):
    """Formatter producing one JSON object per line with a UTC ``time`` field.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: 2025-12-04T10:48:37.123Z

    Dict messages are emitted as-is (structured logging), plain messages are
    wrapped as ``{"message": ...}``. The level name is added as ``level``
    unless the message already sets it.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a JSONL entry.

        Args:
            record: The log record to format.

        Returns:
            str: JSON-formatted log entry with timestamp first.
        """
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        if isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {"message": record.getMessage()}

        log_entry = {"time": timestamp, "level": record.levelname, **log_data}
        return json.dumps(log_entry, default=str)
