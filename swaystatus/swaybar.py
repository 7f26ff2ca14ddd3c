"""Follow the compositor's bar configuration and visibility."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable

from swaystatus.ipc import IpcError

_LOG = logging.getLogger(__name__)

MODE_INVISIBLE = "invisible"


@dataclass
class BarConfig:
    """The parts of a bar configuration that matter for visibility."""

    id: str = ""
    mode: str = ""
    hidden_state: str = ""


def _load(payload):
    if isinstance(payload, (str, bytes, bytearray)):
        return json.loads(payload)
    return payload


def parse_config(payload) -> BarConfig:
    """Build a BarConfig from a JSON payload, keeping only string fields."""
    data = _load(payload)

    def text(key: str) -> str:
        value = data.get(key)
        return value if isinstance(value, str) else ""

    return BarConfig(id=text("id"), mode=text("mode"), hidden_state=text("hidden_state"))


class BarIpcClient:
    """Turns bar configuration and visibility events into a bar mode."""

    def __init__(self, bar_id: str, set_mode: Callable[[str], None]):
        self.bar_id = bar_id
        self.set_mode = set_mode
        self.bar_config = BarConfig()
        self.visible_by_modifier = False

    def on_initial_config(self, payload) -> None:
        """Apply the reply to a bar configuration request."""
        data = _load(payload)
        if not data.get("success", True):
            raise IpcError(str(data.get("error", "Unknown error")))
        self.on_config_update(parse_config(data))

    def on_ipc_event(self, payload) -> None:
        """Apply a bar_state_update or barconfig_update event."""
        try:
            data = _load(payload)
            event_id = data.get("id")
            if isinstance(event_id, str) and event_id != self.bar_id:
                _LOG.debug("swaybar ipc: ignore event for %s", event_id)
                return
            if "visible_by_modifier" in data:
                self.on_visibility_update(bool(data["visible_by_modifier"]))
            else:
                self.on_config_update(parse_config(data))
        except (ValueError, AttributeError, TypeError) as exc:
            _LOG.error("BarIpcClient.on_ipc_event %s", exc)

    def on_config_update(self, config: BarConfig) -> None:
        _LOG.info(
            "config update for %s: id %s, mode %s, hidden_state %s",
            self.bar_id,
            config.id,
            config.mode,
            config.hidden_state,
        )
        self.bar_config = config
        self.update()

    def on_visibility_update(self, visible_by_modifier: bool) -> None:
        _LOG.debug("visibility update for %s: %s", self.bar_id, visible_by_modifier)
        self.visible_by_modifier = visible_by_modifier
        self.update()

    def update(self) -> None:
        """Work out whether the bar is visible and report the mode."""
        visible = self.visible_by_modifier
        if self.bar_config.mode == "invisible":
            visible = False
        elif self.bar_config.mode != "hide" or self.bar_config.hidden_state != "hide":
            visible = True
        self.set_mode(self.bar_config.mode if visible else MODE_INVISIBLE)