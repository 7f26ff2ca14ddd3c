"""A clock label that ticks on interval boundaries."""

from __future__ import annotations

import math
import time
from datetime import datetime
from typing import Optional, Tuple, Union


def next_tick(now: Union[float, datetime], interval: int) -> int:
    """Return the epoch second of the next interval boundary after ``now``."""
    if interval <= 0:
        raise ValueError("interval must be positive")
    if isinstance(now, datetime):
        now = now.timestamp()
    timeout = math.floor(now + interval)
    return timeout - timeout % interval


class SimpleClock:
    """Formats the local time with ``{:%H:%M}``-style format strings."""

    def __init__(self, config=None):
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{:%H:%M}"
        self.interval = int(self.config.get("interval", 60))
        tooltip_format = self.config.get("tooltip-format")
        self.tooltip_format = tooltip_format if isinstance(tooltip_format, str) else None
        self.tooltip_enabled = bool(self.config.get("tooltip", True))

    def render(self, now: Optional[datetime] = None) -> Tuple[str, Optional[str]]:
        """Return the label text and the tooltip (None when tooltips are off)."""
        if now is None:
            if hasattr(time, "tzset"):
                time.tzset()
            now = datetime.now().astimezone()
        text = self.format.format(now)
        tooltip = None
        if self.tooltip_enabled:
            tooltip = self.tooltip_format.format(now) if self.tooltip_format else text
        return text, tooltip