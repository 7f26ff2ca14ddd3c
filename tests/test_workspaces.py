import json

import pytest

from swaystatus.workspaces import (
    Workspaces,
    convert_workspace_name_to_num,
    trim_workspace_name,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("1", 1),
        ("10:web", 10),
        ("web", -1),
        ("", -1),
        ("2147483647", 2147483647),
        ("99999999999", -1),
    ],
)
def test_convert_workspace_name_to_num(name, expected):
    assert convert_workspace_name_to_num(name) == expected


def test_trim_workspace_name():
    assert trim_workspace_name("1:web") == "web"
    assert trim_workspace_name("web") == "web"
    assert trim_workspace_name("a:b:c") == "b:c"


def _payload():
    return [
        {"name": "web", "num": -1, "output": "DP-1", "focused": False},
        {"name": "3", "num": 3, "output": "DP-1", "focused": True},
        {"name": "1", "num": 1, "output": "DP-1", "focused": False},
        {"name": "2", "num": 2, "output": "HDMI-A-1", "focused": False},
    ]


def _module(config=None):
    module = Workspaces(config or {}, "DP-1")
    module.on_cmd(json.dumps(_payload()))
    return module


def test_on_cmd_filters_and_sorts():
    module = _module()
    names = [ws["name"] for ws in module.workspaces]
    assert names == ["1", "3", "web"]


def test_on_cmd_all_outputs_keeps_everything():
    module = _module({"all-outputs": True})
    names = [ws["name"] for ws in module.workspaces]
    assert names == ["1", "2", "3", "web"]


def test_persistent_workspaces_inserted():
    config = {
        "persistent_workspaces": {
            "5": [],
            "9": ["DP-1"],
            "7": ["HDMI-A-1"],
            "2": [],
        }
    }
    module = _module(config)
    names = [ws["name"] for ws in module.workspaces]
    assert names == ["1", "3", "5", "9", "web"]
    by_name = {ws["name"]: ws for ws in module.workspaces}
    assert by_name["9"]["target_output"] == "DP-1"
    assert by_name["5"]["target_output"] == ""


def test_cycle_wraparound():
    module = _module()
    # focused is "3", in the middle
    assert module.cycle_workspace(prev=False) == "web"
    assert module.cycle_workspace(prev=True) == "1"
    module.workspaces[1]["focused"] = False
    module.workspaces[2]["focused"] = True
    assert module.cycle_workspace(prev=False) == "1"


def test_cycle_without_wraparound():
    module = _module({"disable-scroll-wraparound": True})
    module.workspaces[1]["focused"] = False
    module.workspaces[2]["focused"] = True
    assert module.cycle_workspace(prev=False) == "web"
    assert module.scroll_command("down") is None


def test_scroll_command():
    module = _module()
    assert module.scroll_command("down") == 'workspace --no-auto-back-and-forth "web"'
    assert module.scroll_command("left") == 'workspace --no-auto-back-and-forth "1"'
    assert module.scroll_command("none") is None


def test_scroll_command_without_focus():
    module = Workspaces({}, "DP-1")
    assert module.scroll_command("up") is None
    assert module.cycle_workspace(prev=True) is None


def test_switch_command():
    module = Workspaces({}, "DP-1")
    assert module.switch_command({"name": "4"}) == 'workspace  "4"'
    assert module.switch_command({"name": "4", "target_output": "DP-1"}) == (
        'workspace --no-auto-back-and-forth "4"; move workspace to output "DP-1"; '
        'workspace --no-auto-back-and-forth "4"'
    )
    module = Workspaces({"disable-auto-back-and-forth": True}, "DP-1")
    assert module.switch_command({"name": "4"}) == 'workspace --no-auto-back-and-forth "4"'


def test_get_icon():
    config = {"format-icons": {"1": "one", "urgent": "U", "default": "D", "mail": "M"}}
    module = Workspaces(config, "DP-1")
    assert module.get_icon("1", {"urgent": True}) == "one"
    assert module.get_icon("2", {"urgent": True}) == "U"
    assert module.get_icon("3", {}) == "D"
    module = Workspaces({"format-icons": {"mail": "M"}}, "DP-1")
    assert module.get_icon("4:mail", {}) == "M"
    assert module.get_icon("5", {}) == "5"


def test_render_classes_and_labels():
    module = _module({"format": "{index}:{name}"})
    buttons = module.render()
    assert [b.name for b in buttons] == ["1", "3", "web"]
    focused = buttons[1]
    assert "focused" in focused.classes
    assert "current_output" in focused.classes
    assert focused.label == "3:3"
    assert all(b.visible for b in buttons)


def test_render_removes_stale_buttons_and_current_only():
    module = _module({"current-only": True})
    module.render()
    module.on_cmd([{"name": "1", "num": 1, "output": "DP-1", "focused": True}])
    buttons = module.render()
    assert [b.name for b in buttons] == ["1"]
    assert buttons[0].visible is True
    assert buttons[0].label == "1"


def test_render_persistent_class():
    module = _module({"persistent_workspaces": {"8": []}})
    buttons = {b.name: b for b in module.render()}
    assert "persistent" in buttons["8"].classes
    assert "persistent" not in buttons["1"].classes