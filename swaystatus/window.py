"""Show the title of the focused window."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

_LOG = logging.getLogger(__name__)

_MARKUP_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
)
_REPLACEMENT_REF = re.compile(r"\$(\$|&|`|'|\d{1,2})")


@dataclass(frozen=True)
class FocusedNode:
    """The focused window and the number of windows beside it."""

    app_nb: int = 0
    id: int = -1
    title: str = ""
    app_id: str = ""


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


def leaf_nodes_in_workspace(node) -> int:
    """Count the windows below a node; an empty workspace counts zero."""
    nodes = node.get("nodes") or []
    floating = node.get("floating_nodes") or []
    if not nodes and not floating:
        return 0 if node.get("type") == "workspace" else 1
    return sum(leaf_nodes_in_workspace(child) for child in [*nodes, *floating])


@dataclass
class _Search:
    output: str
    output_name: str
    all_outputs: bool
    workspace: Optional[dict] = None


def _search(nodes, state: _Search) -> FocusedNode:
    for node in nodes or []:
        if isinstance(node.get("output"), str):
            state.output = node["output"]
        if node.get("focused") and node.get("type") in ("con", "floating_con"):
            if state.all_outputs or state.output == state.output_name:
                app_id = node.get("app_id")
                if not isinstance(app_id, str):
                    props = node.get("window_properties")
                    app_id = _as_string(props.get("instance")) if isinstance(props, dict) else ""
                if state.workspace is None:
                    nb = len(node)
                else:
                    nb = leaf_nodes_in_workspace(state.workspace)
                title = _as_string(node.get("name")).translate(_MARKUP_ESCAPES)
                return FocusedNode(nb, _as_int(node.get("id")), title, app_id)
        if node.get("type") == "workspace":
            state.workspace = node
        for key in ("nodes", "floating_nodes"):
            found = _search(node.get(key), state)
            if found.id > -1 and found.title:
                return found
    return FocusedNode()


def _find_focused(nodes, output: str, output_name: str, all_outputs: bool) -> FocusedNode:
    return _search(nodes, _Search(output, output_name, all_outputs))


def get_focused_node(nodes, output_name: str, all_outputs: bool = False) -> FocusedNode:
    """Find the focused window on ``output_name`` (or on any output)."""
    return _find_focused(nodes, "", output_name, all_outputs)


def _ecma_replacement(template: str):
    def expand(match: re.Match) -> str:
        def reference(ref: re.Match) -> str:
            text = ref.group(1)
            if text == "$":
                return "$"
            if text == "&":
                return match.group(0)
            if text == "`":
                return match.string[: match.start()]
            if text == "'":
                return match.string[match.end():]
            groups = match.re.groups
            if len(text) == 2 and 1 <= int(text) <= groups:
                return match.group(int(text)) or ""
            number = int(text[0])
            if 1 <= number <= groups:
                return (match.group(number) or "") + text[1:]
            return ref.group(0)

        return _REPLACEMENT_REF.sub(reference, template)

    return expand


def rewrite_title(title: str, rules) -> str:
    """Apply every rule whose pattern matches the whole title; ``$1`` refers to groups."""
    if not isinstance(rules, dict):
        return title
    result = title
    for pattern, replacement in rules.items():
        if not isinstance(pattern, str) or not isinstance(replacement, str):
            continue
        try:
            rule = re.compile(pattern)
        except re.error as exc:
            _LOG.error("Invalid rule %s: %s", pattern, exc)
            continue
        if rule.fullmatch(title):
            result = rule.sub(_ecma_replacement(replacement), result)
    return result


class Window:
    """Label with the focused window title and the bar's window classes."""

    def __init__(self, config=None, output_name: str = ""):
        self.config = dict(config or {})
        self.output_name = output_name
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{}"
        self.tooltip_enabled = bool(self.config.get("tooltip", True))
        self.all_outputs = bool(self.config.get("all-outputs", False))
        self.focused = FocusedNode()
        self.classes: set = set()
        self.old_app_id = ""
        self.tooltip_text: Optional[str] = None

    def on_cmd(self, payload) -> None:
        """Apply the reply to a tree request."""
        try:
            data = _load(payload)
            output = data.get("output")
            output = output if isinstance(output, str) else ""
            self.focused = _find_focused(
                data.get("nodes") or [], output, self.output_name, self.all_outputs
            )
        except (ValueError, AttributeError, TypeError) as exc:
            _LOG.error("Window: %s", exc)

    def update(self) -> str:
        """Update the window classes and return the label markup."""
        classes = self.classes
        if self.old_app_id:
            classes.discard(self.old_app_id)
        app_id = self.focused.app_id
        if self.focused.app_nb == 0:
            classes.discard("solo")
            classes.add("empty")
        elif self.focused.app_nb == 1:
            classes.discard("empty")
            classes.add("solo")
            if app_id and app_id not in classes:
                classes.add(app_id)
                self.old_app_id = app_id
        else:
            classes.discard("solo")
            classes.discard("empty")
        title = rewrite_title(self.focused.title, self.config.get("rewrite"))
        text = self.format.format(title, title=title, app_id=app_id)
        if self.tooltip_enabled:
            self.tooltip_text = self.focused.title
        return text