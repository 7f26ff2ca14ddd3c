import json

from swaystatus.window import (
    FocusedNode,
    Window,
    get_focused_node,
    leaf_nodes_in_workspace,
    rewrite_title,
)


def con(con_id, name, app_id="foot", focused=False):
    return {
        "type": "con",
        "id": con_id,
        "name": name,
        "focused": focused,
        "app_id": app_id,
        "nodes": [],
        "floating_nodes": [],
    }


def tree(windows, output="eDP-1"):
    workspace = {
        "type": "workspace",
        "name": "1",
        "output": output,
        "nodes": windows,
        "floating_nodes": [],
    }
    return {
        "nodes": [
            {"type": "output", "name": output, "nodes": [workspace], "floating_nodes": []}
        ]
    }


def test_leaf_nodes_empty_workspace():
    assert leaf_nodes_in_workspace({"type": "workspace", "nodes": [], "floating_nodes": []}) == 0


def test_leaf_nodes_single_con():
    assert leaf_nodes_in_workspace(con(1, "a")) == 1


def test_leaf_nodes_counts_floating():
    workspace = {"type": "workspace", "nodes": [con(1, "a")], "floating_nodes": [con(2, "b")]}
    assert leaf_nodes_in_workspace(workspace) == 2


def test_focused_node_found():
    windows = [con(7, "Page - Mozilla Firefox", "firefox", True), con(8, "term")]
    found = get_focused_node(tree(windows)["nodes"], "eDP-1", False)
    assert found == FocusedNode(2, 7, "Page - Mozilla Firefox", "firefox")


def test_focused_node_other_output():
    windows = [con(7, "editor", "code", True)]
    assert get_focused_node(tree(windows)["nodes"], "HDMI-A-1", False) == FocusedNode()
    assert get_focused_node(tree(windows)["nodes"], "HDMI-A-1", True).id == 7


def test_focused_node_without_workspace_counts_members():
    node = con(3, "lonely", "foot", True)
    found = get_focused_node([node], "", True)
    assert found.app_nb == len(node)


def test_focused_node_instance_fallback():
    node = con(4, "xterm", None, True)
    node["window_properties"] = {"instance": "xterm"}
    found = get_focused_node(tree([node])["nodes"], "eDP-1", False)
    assert found.app_id == "xterm"


def test_focused_node_title_escaped():
    found = get_focused_node(tree([con(5, "a<b", "foot", True)])["nodes"], "eDP-1", False)
    assert found.title == "a&lt;b"


def test_rewrite_title_group_reference():
    rules = {"(.*) - Mozilla Firefox": "Firefox: $1"}
    assert rewrite_title("page - Mozilla Firefox", rules) == "Firefox: page"


def test_rewrite_title_requires_full_match():
    rules = {"Firefox": "fx"}
    assert rewrite_title("page - Mozilla Firefox", rules) == "page - Mozilla Firefox"


def test_rewrite_title_invalid_rule_skipped():
    rules = {"(": "broken", "term": "shell"}
    assert rewrite_title("term", rules) == "shell"


def test_rewrite_title_without_rules():
    assert rewrite_title("term", None) == "term"


def test_window_solo_classes():
    window = Window({}, "eDP-1")
    window.on_cmd(json.dumps(tree([con(7, "editor", "code", True)])))
    assert window.update() == "editor"
    assert window.classes == {"solo", "code"}
    assert window.tooltip_text == "editor"


def test_window_app_class_replaced():
    window = Window({}, "eDP-1")
    window.on_cmd(tree([con(7, "editor", "code", True)]))
    window.update()
    window.on_cmd(tree([con(8, "term", "foot", True)]))
    window.update()
    assert window.classes == {"solo", "foot"}


def test_window_empty_workspace():
    window = Window({}, "eDP-1")
    window.on_cmd(tree([]))
    assert window.update() == ""
    assert "empty" in window.classes


def test_window_format_and_rewrite():
    config = {"format": "{app_id}: {title}", "rewrite": {"(.*) - Mozilla Firefox": "$1"}}
    window = Window(config, "eDP-1")
    window.on_cmd(tree([con(7, "page - Mozilla Firefox", "firefox", True), con(8, "x")]))
    assert window.update() == "firefox: page"
    assert "solo" not in window.classes