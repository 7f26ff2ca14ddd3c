# swaystatus

This package provides building blocks for a status bar that runs under the
sway window manager. It talks to sway over its IPC socket. It turns sway's
replies and events, along with routing and Wi-Fi details, into label text,
tooltips and CSS-style class sets for a bar. It needs only the standard
library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `swaystatus.ipc`

The sway IPC client.

- `get_socket_path()` returns `SWAYSOCK` when it is set. Otherwise it runs
  `sway --get-socketpath` and returns what that prints.
- `Ipc(socket_path=None)` opens two connections. One carries commands and the
  other carries events. Its methods are:
  - `send_cmd(msg_type, payload)` sends a request and passes the reply to every
    callable in `cmd_handlers`.
  - `subscribe(payload)` takes a JSON string or a list of event names. It
    raises `IpcError` unless sway replies with success.
  - `handle_event()` waits for one event and passes it to `event_handlers`.
  - `close()` closes both connections. `Ipc` also works as a context manager.
- `encode_message(msg_type, payload)` frames a message.
  `read_response(sock)` reads one framed reply as an `IpcResponse`, which has
  `size`, `type`, `payload` and `decode()`.
- `MessageType` names the request and event types.
- Every failure raises `IpcError`.

### `swaystatus.swaybar`

- `parse_config(payload)` builds a `BarConfig` with `id`, `mode` and
  `hidden_state`.
- `BarIpcClient(bar_id, set_mode)` handles bar configuration replies
  (`on_initial_config`) and `bar_state_update` / `barconfig_update` events
  (`on_ipc_event`). It ignores events that belong to other bars. After each
  change it calls `set_mode` with the bar's mode, or with `"invisible"` when
  the bar should be hidden.

### `swaystatus.workspaces`

- `Workspaces(config, output_name)` keeps the workspace list for one output.
  - `on_cmd(payload)` reads a `GET_WORKSPACES` reply. It adds
    `persistent_workspaces` from the config and sorts the list the way sway
    does, with numbered workspaces first.
  - `render()` returns one `ButtonState` per workspace, in display order. Each
    has a label, a visibility flag and the classes `focused`, `visible`,
    `urgent`, `persistent` and `current_output`.
  - `get_icon`, `cycle_workspace`, `scroll_command` and `switch_command` pick
    icons and build the commands for scrolling and clicking.
- `convert_workspace_name_to_num(name)` returns the number a workspace name
  starts with, or -1.
- `trim_workspace_name(name)` drops everything up to and including the first
  colon.

### `swaystatus.window`

- `get_focused_node(nodes, output_name, all_outputs)` finds the focused window
  in a `GET_TREE` reply. It returns a `FocusedNode` with the window count, id,
  markup-escaped title and app id.
- `leaf_nodes_in_workspace(node)` counts the windows below a node.
- `rewrite_title(title, rules)` applies each regex rule whose pattern matches
  the whole title. Replacements use `$1`-style group references.
- `Window(config, output_name)` takes tree replies through `on_cmd`.
  `update()` returns the label and keeps the bar's `empty` / `solo` / app-id
  classes in `classes`.

### `swaystatus.mode`

- `Mode(config)` takes mode events through `on_event`. `update()` returns the
  label markup, or `None` in the default mode.

### `swaystatus.language`

- `Language(config, layouts)` takes `GET_INPUTS` replies (`on_cmd`) and input
  events (`on_event`). It shows the active layout of the keyboard that has the
  most layouts. Formats can use `{short}`, `{shortDescription}`, `{long}`,
  `{variant}` and `{flag}`. Layouts that share a short name are numbered.
- `update()` returns the label and the tooltip.
- `Layout.country_flag()` builds a flag emoji from a two-letter short name.
- `load_xkb_layouts(path)` reads layouts and their variants from an XKB rules
  XML file. It is used when no layouts are passed in, and it defaults to
  `/usr/share/X11/xkb/rules/evdev.xml`.

### `swaystatus.clock`

- `SimpleClock(config)` formats the local time with a format such as
  `{:%H:%M}`. `render(now=None)` returns the text and the tooltip.
- `next_tick(now, interval)` returns the epoch second of the next interval
  boundary.

### `swaystatus.netdev`

- `read_bandwidth_usage(check_interface, path)` adds up the received and
  transmitted bytes of the matching interfaces in `/proc/net/dev`.
- `wildcard_match(pattern, text)` matches a name against a pattern with `*`
  and `?`.
- `signal_from_mbm(mbm)` turns a signal level into a `SignalInfo` with dBm, a
  0–100 strength and a rating such as `"Streaming"`.
- `parse_essid(ies)` reads the network name from information elements.
- `associated_or_joined(status)` tells whether a BSS status means the device
  is connected.
- `prefix_to_netmask(family, prefixlen)` turns a prefix length into a netmask.

### `swaystatus.network`

- `NetworkState(config, family)` follows `LinkMessage`, `AddrMessage` and
  `RouteMessage` values through `handle_link`, `handle_addr` and
  `handle_route`.
  - It selects the configured interface, or the one that carries the default
    route, and tracks its address, netmask, gateway and carrier.
  - `next_dump()` and `dump_done()` say which dump to request next.
  - `apply_scan(bss)` takes Wi-Fi scan details.
  - `state()` returns one of `disabled`, `disconnected`, `linked`, `ethernet`
    or `wifi`.
  - `render(bandwidth_down, bandwidth_up, interval)` returns the label and the
    tooltip.
- `parse_rtattrs(data)` splits a block of routing attributes.

## Example

```python
import socket
from datetime import datetime

from swaystatus.clock import SimpleClock
from swaystatus.ipc import Ipc, MessageType, get_socket_path
from swaystatus.network import AddrMessage, LinkMessage, NetworkState
from swaystatus.workspaces import Workspaces

with Ipc(get_socket_path()) as ipc:
    reply = ipc.send_cmd(MessageType.GET_WORKSPACES, "")
    workspaces = Workspaces({"format": "{name}"}, "eDP-1")
    workspaces.on_cmd(reply.payload)
    for button in workspaces.render():
        print(button.label, sorted(button.classes))

print(SimpleClock().render(datetime(2024, 1, 1, 9, 5)))  # ('09:05', '09:05')

net = NetworkState({"interface": "wl*", "format-wifi": "{essid} {ipaddr}/{cidr}"})
net.handle_link(LinkMessage(3, ifname="wlan0", carrier=True))
net.handle_addr(AddrMessage(3, socket.AF_INET, 24, "192.0.2.10"))
print(net.state(), net.render())  # ethernet ('wlan0', 'wlan0')
```

## What it does not do

This package is a set of libraries. It has no command to run, and it draws no
bar or window. It also does not open routing or Wi-Fi sockets, read rfkill
state, or run an event loop or worker threads. Read the link, address, route
and scan data yourself, then hand it to `NetworkState` and the other classes.
Call `Ipc.handle_event()` from your own loop.