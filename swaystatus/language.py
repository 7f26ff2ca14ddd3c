"""Show the active keyboard layout."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

_LOG = logging.getLogger(__name__)

XKB_LAYOUT_NAMES_KEY = "xkb_layout_names"
XKB_ACTIVE_LAYOUT_NAME_KEY = "xkb_active_layout_name"
DEFAULT_RULES_PATH = "/usr/share/X11/xkb/rules/evdev.xml"


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


@dataclass
class Layout:
    """One keyboard layout as known to the xkb registry."""

    full_name: str = ""
    short_name: str = ""
    variant: str = ""
    short_description: str = ""

    def country_flag(self) -> str:
        """Flag emoji built from a two-letter lower-case short name, or ''."""
        raw = self.short_name.encode("utf-8")
        if len(raw) != 2:
            return ""
        result = bytearray(b"\xf0\x9f\x87\x00\xf0\x9f\x87\x00")
        result[3] = (raw[0] + 0x45) & 0xFF
        result[7] = (raw[1] + 0x45) & 0xFF
        if not (0xA6 <= result[3] <= 0xBF and 0xA6 <= result[7] <= 0xBF):
            return ""
        return result.decode("utf-8")


def _item_text(item, tag: str) -> Optional[str]:
    element = item.find(tag) if item is not None else None
    if element is None or element.text is None:
        return None
    return element.text.strip()


def load_xkb_layouts(path: str = DEFAULT_RULES_PATH) -> List[Layout]:
    """Read the layouts and their variants from an xkb rules XML file."""
    root = ElementTree.parse(path).getroot()
    briefs: Dict[str, str] = {}
    layouts: List[Layout] = []
    for layout in root.iter("layout"):
        item = layout.find("configItem")
        name = _item_text(item, "name") or ""
        brief = _item_text(item, "shortDescription")
        if brief is not None:
            briefs[name] = brief
        layouts.append(
            Layout(_item_text(item, "description") or "", name, "", brief or "")
        )
        for variant in layout.iter("variant"):
            vitem = variant.find("configItem")
            vbrief = _item_text(vitem, "shortDescription")
            if vbrief is None:
                vbrief = briefs.get(name, "")
            layouts.append(
                Layout(
                    _item_text(vitem, "description") or "",
                    name,
                    _item_text(vitem, "name") or "",
                    vbrief,
                )
            )
    return layouts


class Language:
    """Label with the active layout of the keyboard that has the most layouts."""

    def __init__(self, config=None, layouts: Optional[Iterable[Layout]] = None):
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{}"
        self.tooltip_enabled = bool(self.config.get("tooltip", True))
        self.tooltip_format = (
            _as_string(self.config["tooltip-format"]) if "tooltip-format" in self.config else ""
        )
        self.is_variant_displayed = "{variant}" in self.format
        self.shows_short_names = any(
            token in self.format for token in ("{}", "{short}", "{shortDescription}")
        )
        self._available = list(layouts) if layouts is not None else None
        self.layouts_map: Dict[str, Layout] = {}
        self.layout = Layout()

    def _available_layouts(self) -> List[Layout]:
        if self._available is None:
            self._available = load_xkb_layouts()
        return self._available

    def on_cmd(self, payload) -> None:
        """Apply the reply to an input list request."""
        try:
            data = _load(payload) or []
            best, most = 0, 0
            for index, device in enumerate(data):
                names = device.get(XKB_LAYOUT_NAMES_KEY)
                size = len(names) if isinstance(names, list) else 0
                if size > most:
                    most, best = size, index
            device = data[best] if data else {}
            names = device.get(XKB_LAYOUT_NAMES_KEY)
            used = [_as_string(n) for n in names] if isinstance(names, list) else []
            self.init_layouts_map(used)
            self.set_current_layout(_as_string(device.get(XKB_ACTIVE_LAYOUT_NAME_KEY)))
        except (ValueError, AttributeError, TypeError, OSError, ElementTree.ParseError) as exc:
            _LOG.error("Language: %s", exc)

    def on_event(self, payload) -> None:
        """Apply an input event."""
        try:
            data = _load(payload).get("input") or {}
            if data.get("type") == "keyboard":
                self.set_current_layout(_as_string(data.get(XKB_ACTIVE_LAYOUT_NAME_KEY)))
        except (ValueError, AttributeError, TypeError) as exc:
            _LOG.error("Language: %s", exc)

    def init_layouts_map(self, used_layouts: List[str]) -> None:
        """Register the used layouts, numbering ones that share a short name."""
        counts: Dict[str, int] = {}
        for layout in self._available_layouts():
            if layout.full_name not in used_layouts:
                continue
            if not self.is_variant_displayed:
                counts[layout.short_name] = counts.get(layout.short_name, 0) + 1
            self.layouts_map.setdefault(layout.full_name, replace(layout))

        if self.is_variant_displayed or not counts:
            return

        numbers: Dict[str, int] = {}
        for name in used_layouts:
            used = self.layouts_map.get(name)
            if used is None or counts.get(used.short_name, 0) < 2:
                continue
            short = used.short_name
            numbers.setdefault(short, 1)
            if self.shows_short_names:
                number = numbers[short]
                used.short_name = f"{short}{number}"
                used.short_description = f"{used.short_description}{number}"
                numbers[short] = number + 1

    def set_current_layout(self, name: str) -> None:
        self.layout = self.layouts_map.setdefault(name, Layout())

    def _render(self, fmt: str) -> str:
        layout = self.layout
        values = {
            "short": layout.short_name,
            "shortDescription": layout.short_description,
            "long": layout.full_name,
            "variant": layout.variant,
            "flag": layout.country_flag(),
        }
        return fmt.format(*values.values(), **values).strip()

    def update(self) -> Tuple[str, Optional[str]]:
        """Return the label markup and the tooltip (None when tooltips are off)."""
        text = self._render(self.format)
        tooltip = None
        if self.tooltip_enabled:
            tooltip = self._render(self.tooltip_format) if self.tooltip_format else text
        return text, tooltip