"""Clock used by every timestamp check.

Call through the module (``clock.epoch_time()``) so tests can freeze time
with ``monkeypatch.setattr(clock, "epoch_time", ...)``.
"""

from __future__ import annotations

__all__ = ["epoch_time"]

import math
import time


def epoch_time() -> int:
    """Return the current unix timestamp in whole seconds."""
    return math.floor(time.time())
