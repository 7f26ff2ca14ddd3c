"""Show the current binding mode."""

from __future__ import annotations

import json
import logging
from typing import Optional

_LOG = logging.getLogger(__name__)

_MARKUP_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
)


def _load(payload):
    if isinstance(payload, (str, bytes, bytearray)):
        return json.loads(payload)
    return payload


class Mode:
    """Label holding the binding mode, hidden in the default mode."""

    def __init__(self, config=None):
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{}"
        self.tooltip_enabled = bool(self.config.get("tooltip", True))
        self.mode = ""
        self.tooltip_text: Optional[str] = None

    def on_event(self, payload) -> None:
        """Apply a mode event."""
        try:
            data = _load(payload)
            change = data.get("change")
            if change != "default":
                text = change if isinstance(change, str) else ""
                if data.get("pango_markup"):
                    self.mode = text
                else:
                    self.mode = text.translate(_MARKUP_ESCAPES)
            else:
                self.mode = ""
        except (ValueError, AttributeError, TypeError) as exc:
            _LOG.error("Mode: %s", exc)

    def update(self) -> Optional[str]:
        """Return the label markup, or None when the label is hidden."""
        if not self.mode:
            return None
        text = self.format.format(self.mode)
        if self.tooltip_enabled:
            self.tooltip_text = self.mode
        return text