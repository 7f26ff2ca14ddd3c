"""Workspace buttons driven by the compositor's workspace list."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

_LOG = logging.getLogger(__name__)

INT32_MAX = 2**31 - 1
WORKSPACE_SWITCH_CMD = 'workspace {} "{}"'
NO_BACK_AND_FORTH = "--no-auto-back-and-forth"
_LEADING_DIGITS = re.compile(r"[0-9]+")


def _load(payload):
    if isinstance(payload, (str, bytes, bytearray)):
        return json.loads(payload)
    return payload


def _as_string(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def _as_int(value) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def convert_workspace_name_to_num(name: str) -> int:
    """Return the number a workspace name starts with, or -1."""
    match = _LEADING_DIGITS.match(name)
    if match is None:
        return -1
    number = int(match.group(0))
    if number > INT32_MAX:
        return -1
    return number


def trim_workspace_name(name: str) -> str:
    """Drop everything up to and including the first colon."""
    _, colon, rest = name.partition(":")
    return rest if colon else name


@dataclass
class ButtonState:
    """What a workspace button shows."""

    name: str
    label: str = ""
    markup: bool = True
    visible: bool = True
    classes: Set[str] = field(default_factory=set)


class Workspaces:
    """Keeps the ordered workspace list and the buttons that show it."""

    def __init__(self, config=None, output_name: str = ""):
        self.config = dict(config or {})
        self.output_name = output_name
        self.workspaces: List[dict] = []
        self.buttons: Dict[str, ButtonState] = {}

    @property
    def _all_outputs(self) -> bool:
        return bool(self.config.get("all-outputs", False))

    @property
    def _icons(self) -> dict:
        icons = self.config.get("format-icons")
        return icons if isinstance(icons, dict) else {}

    def on_cmd(self, payload) -> None:
        """Apply the reply to a workspace list request."""
        try:
            data = _load(payload) or []
            workspaces = [
                dict(ws)
                for ws in data
                if self._all_outputs or _as_string(ws.get("output")) == self.output_name
            ]
            persistent = self.config.get("persistent_workspaces")
            if isinstance(persistent, dict):
                known = {_as_string(node.get("name")) for node in data}
                for name, outputs in persistent.items():
                    if name in known:
                        continue  # already displayed by some bar
                    entry = {"name": name, "num": convert_workspace_name_to_num(name)}
                    if isinstance(outputs, list) and outputs:
                        if any(_as_string(out) == self.output_name for out in outputs):
                            entry["target_output"] = self.output_name
                            workspaces.append(entry)
                    else:
                        entry["target_output"] = ""
                        workspaces.append(entry)

            # Unnumbered workspaces keep their order behind the numbered ones.
            max_num = max((_as_int(ws.get("num")) for ws in workspaces), default=-1)
            max_num = max(max_num, -1)
            for ws in workspaces:
                num = _as_int(ws.get("num"))
                if num > -1:
                    ws["sort"] = num
                else:
                    max_num += 1
                    ws["sort"] = max_num
            workspaces.sort(key=lambda ws: (ws["sort"], _as_string(ws.get("name"))))
            self.workspaces = workspaces
        except (ValueError, AttributeError, TypeError) as exc:
            _LOG.error("Workspaces: %s", exc)

    def get_icon(self, name: str, node) -> str:
        """Pick the icon for a workspace from ``format-icons``."""
        icons = self._icons
        legacy = self.config.get("format_icons")
        legacy = legacy if isinstance(legacy, dict) else {}
        for key in (name, "urgent", "focused", "visible", "default"):
            if key in ("focused", "visible", "urgent"):
                if isinstance(icons.get(key), str) and node.get(key):
                    return icons[key]
            elif isinstance(legacy.get("persistent"), str) and isinstance(
                node.get("target_output"), str
            ):
                return _as_string(icons.get("persistent"))
            elif isinstance(icons.get(key), str):
                return icons[key]
            elif isinstance(icons.get(trim_workspace_name(key)), str):
                return icons[trim_workspace_name(key)]
        return name

    def _focused_index(self) -> Optional[int]:
        for index, ws in enumerate(self.workspaces):
            if ws.get("focused"):
                return index
        return None

    def cycle_workspace(self, prev: bool) -> Optional[str]:
        """Name of the workspace before or after the focused one, or None."""
        index = self._focused_index()
        if index is None:
            return None
        wrap = not self.config.get("disable-scroll-wraparound", False)
        last = len(self.workspaces) - 1
        if prev:
            if index == 0:
                if wrap:
                    return _as_string(self.workspaces[last].get("name"))
            else:
                index -= 1
        else:
            index += 1
            if index > last:
                if not wrap:
                    index = last
                else:
                    return _as_string(self.workspaces[0].get("name"))
        return _as_string(self.workspaces[index].get("name"))

    def scroll_command(self, direction: str) -> Optional[str]:
        """Command that a scroll in ``direction`` sends, or None when nothing changes."""
        if direction in ("down", "right"):
            prev = False
        elif direction in ("up", "left"):
            prev = True
        else:
            return None
        index = self._focused_index()
        if index is None:
            return None
        name = self.cycle_workspace(prev)
        if name is None or name == _as_string(self.workspaces[index].get("name")):
            return None
        return WORKSPACE_SWITCH_CMD.format(NO_BACK_AND_FORTH, name)

    def switch_command(self, node) -> str:
        """Command that clicking the button of ``node`` sends."""
        name = _as_string(node.get("name"))
        target = node.get("target_output")
        if isinstance(target, str):
            template = (
                WORKSPACE_SWITCH_CMD
                + '; move workspace to output "{}"; '
                + WORKSPACE_SWITCH_CMD
            )
            return template.format(NO_BACK_AND_FORTH, name, target, NO_BACK_AND_FORTH, name)
        flag = NO_BACK_AND_FORTH if self.config.get("disable-auto-back-and-forth") else ""
        return WORKSPACE_SWITCH_CMD.format(flag, name)

    def _filter_buttons(self) -> bool:
        removed = False
        for name in list(self.buttons):
            ws = next(
                (w for w in self.workspaces if _as_string(w.get("name")) == name), None
            )
            if ws is None or (
                not self._all_outputs and _as_string(ws.get("output")) != self.output_name
            ):
                del self.buttons[name]
                removed = True
        return removed

    def render(self) -> List[ButtonState]:
        """Bring the buttons in line with the workspaces and return them in order."""
        need_reorder = self._filter_buttons()
        fmt = self.config.get("format")
        markup = not self.config.get("disable-markup", False)
        current_only = bool(self.config.get("current-only", False))
        for ws in self.workspaces:
            name = _as_string(ws.get("name"))
            button = self.buttons.get(name)
            if button is None:
                need_reorder = True
                button = ButtonState(name)
                self.buttons[name] = button
            classes = button.classes
            for key in ("focused", "visible", "urgent"):
                if ws.get(key):
                    classes.add(key)
                else:
                    classes.discard(key)
            if isinstance(ws.get("target_output"), str):
                classes.add("persistent")
            else:
                classes.discard("persistent")
            output = ws.get("output")
            if isinstance(output, str) and output == self.output_name:
                classes.add("current_output")
            else:
                classes.discard("current_output")
            label = name
            if isinstance(fmt, str):
                label = fmt.format(
                    icon=self.get_icon(name, ws),
                    value=name,
                    name=trim_workspace_name(name),
                    index=_as_string(ws.get("num")),
                )
            button.label = label
            button.markup = markup
            button.visible = bool(ws.get("focused")) if current_only else True
        if need_reorder:
            ordered: Dict[str, ButtonState] = {}
            for ws in self.workspaces:
                name = _as_string(ws.get("name"))
                if name in self.buttons:
                    ordered[name] = self.buttons[name]
            for name, button in self.buttons.items():
                ordered.setdefault(name, button)
            self.buttons = ordered
        return list(self.buttons.values())