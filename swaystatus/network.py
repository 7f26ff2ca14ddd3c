"""Network state kept up to date from routing messages and Wi-Fi scan results."""

from __future__ import annotations

import logging
import socket
import struct
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from swaystatus.netdev import (
    associated_or_joined,
    parse_essid,
    prefix_to_netmask,
    signal_from_mbm,
    wildcard_match,
)

_LOG = logging.getLogger(__name__)

DEFAULT_FORMAT = "{ifname}"
DEFAULT_INTERVAL = 60

IFF_UP = 0x1
RT_SCOPE_LINK = 253
RT_TABLE_MAIN = 254

_RTATTR_HEADER = struct.Struct("=HH")
_RTA_ALIGNTO = 4

_UNIT_PREFIXES = ("", "k", "M", "G", "T", "P")


def parse_rtattrs(data: bytes) -> List[Tuple[int, bytes]]:
    """Split a block of routing attributes into ``(type, payload)`` pairs.

    Parsing stops at the first attribute whose length does not fit.
    """
    view = bytes(data)
    attrs: List[Tuple[int, bytes]] = []
    offset = 0
    while len(view) - offset >= _RTATTR_HEADER.size:
        length, attr_type = _RTATTR_HEADER.unpack_from(view, offset)
        if length < _RTATTR_HEADER.size or length > len(view) - offset:
            break
        attrs.append((attr_type, view[offset + _RTATTR_HEADER.size:offset + length]))
        offset += (length + _RTA_ALIGNTO - 1) & ~(_RTA_ALIGNTO - 1)
    return attrs


@dataclass(frozen=True)
class LinkMessage:
    """A link announcement: interface index, flags, name and carrier."""

    index: int
    flags: int = IFF_UP
    ifname: Optional[str] = None
    carrier: Optional[bool] = None


@dataclass(frozen=True)
class AddrMessage:
    """An address announcement for an interface."""

    index: int
    family: int
    prefixlen: int
    address: Optional[str] = None
    scope: int = 0


@dataclass(frozen=True)
class RouteMessage:
    """A routing table entry."""

    table: int = RT_TABLE_MAIN
    gateway: Optional[str] = None
    destination: Optional[bytes] = None
    oif: Optional[int] = None
    priority: int = 0


def _pow_format(value: float, unit: str) -> str:
    scaled = float(value)
    step = 0
    while scaled >= 1000 and step < len(_UNIT_PREFIXES) - 1:
        scaled /= 1000
        step += 1
    if step == 0:
        return f"{int(value)}{unit}"
    return f"{scaled:.1f}{_UNIT_PREFIXES[step]}{unit}"


class NetworkState:
    """Tracks the interface in use, its addresses and Wi-Fi details."""

    def __init__(self, config=None, family: Optional[int] = None):
        self.config = dict(config or {})
        if family is None:
            family = socket.AF_INET6 if self.config.get("family") == "ipv6" else socket.AF_INET
        self.family = family
        interval = self.config.get("interval")
        self.interval = interval if isinstance(interval, int) and interval > 0 else DEFAULT_INTERVAL
        self.rfkill_blocked = False
        self.route_priority = 0
        self.link_requests: List[int] = []
        self.wake_requested = False
        self.current_state = ""
        self.want_route_dump = False
        self.want_link_dump = False
        self.want_addr_dump = False
        self.dump_in_progress = False
        self.clear_iface()
        if isinstance(self.config.get("interface"), str):
            self.want_link_dump = True
            self.want_addr_dump = True
        else:
            # Guess the interface from the default route.
            self.want_route_dump = True

    @property
    def _interface(self) -> Optional[str]:
        value = self.config.get("interface")
        return value if isinstance(value, str) else None

    def check_interface(self, name: str) -> bool:
        """Whether ``name`` matches the configured interface (exactly or by wildcard)."""
        pattern = self._interface
        if pattern is None:
            return False
        return pattern == name or wildcard_match(pattern, name)

    def _clear_wifi(self) -> None:
        self.essid = ""
        self.signal_strength_dbm = 0
        self.signal_strength = 0
        self.signal_strength_app = ""
        self.frequency = 0.0

    def clear_iface(self) -> None:
        """Forget the selected interface and everything known about it."""
        self.ifid = -1
        self.ifname = ""
        self.ipaddr = ""
        self.gwaddr = ""
        self.netmask = ""
        self.carrier = False
        self.cidr = 0
        self._clear_wifi()

    def state(self) -> str:
        """One of disabled, disconnected, linked, ethernet or wifi."""
        if self.ifid == -1:
            return "disabled" if self.rfkill_blocked else "disconnected"
        if not self.carrier:
            return "disconnected"
        if not self.ipaddr:
            return "linked"
        if not self.essid:
            return "ethernet"
        return "wifi"

    def handle_link(self, msg: LinkMessage, deleted: bool = False) -> None:
        """Apply a new-link or deleted-link message."""
        if self.ifid != -1 and msg.index != self.ifid:
            return

        if self.ifid != -1 and not (msg.flags & IFF_UP) and self._interface is None:
            # The routes of a downed interface are gone; look for a new default route.
            _LOG.debug("network: if%s down", self.ifid)
            self.clear_iface()
            self.want_route_dump = True
            return

        if not deleted and msg.index == self.ifid:
            if not self.ifname and msg.ifname is not None:
                self.ifname = msg.ifname
            if msg.carrier is not None:
                if self.carrier != msg.carrier:
                    if msg.carrier:
                        self.wake_requested = True
                    else:
                        self._clear_wifi()
                self.carrier = msg.carrier
        elif not deleted and self.ifid == -1:
            name = msg.ifname or ""
            if self.check_interface(name):
                _LOG.debug("network: selecting new interface %s/%s", name, msg.index)
                self.ifname = name
                self.ifid = msg.index
                if msg.carrier is not None:
                    self.carrier = msg.carrier
                self.wake_requested = True
        elif deleted and self.ifid >= 0:
            _LOG.debug("network: interface %s/%s deleted", self.ifname, self.ifid)
            self.clear_iface()

    def handle_addr(self, msg: AddrMessage, deleted: bool = False) -> None:
        """Apply a new-address or deleted-address message."""
        if msg.index != self.ifid or msg.family != self.family:
            return
        # Only addresses of global scope are of interest.
        if msg.scope >= RT_SCOPE_LINK:
            return
        if msg.address is None:
            return
        if not deleted:
            self.ipaddr = msg.address
            self.cidr = msg.prefixlen
            self.netmask = prefix_to_netmask(msg.family, msg.prefixlen)
            _LOG.debug("network: %s, new addr %s/%s", self.ifname, self.ipaddr, self.cidr)
        else:
            self.ipaddr = ""
            self.cidr = 0
            self.netmask = ""
            _LOG.debug(
                "network: %s addr deleted %s/%s", self.ifname, msg.address, msg.prefixlen
            )

    def handle_route(self, msg: RouteMessage, deleted: bool = False) -> None:
        """Apply a new-route or deleted-route message, following the default route."""
        if msg.table != RT_TABLE_MAIN:
            return
        has_gateway = msg.gateway is not None
        has_destination = False
        if msg.destination is not None:
            expected = 4 if self.family == socket.AF_INET else 16
            if len(msg.destination) == expected:
                has_destination = not any(msg.destination)
        oif = msg.oif if msg.oif is not None else -1
        if not (has_gateway and not has_destination and oif != -1):
            return

        if not deleted and (self.ifid == -1 or msg.priority < self.route_priority):
            # A better route may be on another interface: start afresh.
            self.clear_iface()
            self.ifid = oif
            self.route_priority = msg.priority
            self.gwaddr = msg.gateway or ""
            _LOG.debug(
                "network: new default route via %s on if%s metric %s",
                self.gwaddr,
                oif,
                msg.priority,
            )
            self.link_requests.append(oif)
            self.want_addr_dump = True
            self.wake_requested = True
        elif deleted and oif == self.ifid and self.route_priority == msg.priority:
            _LOG.debug(
                "network: default route deleted %s/if%s metric %s",
                self.ifname,
                oif,
                msg.priority,
            )
            self.clear_iface()
            self.want_route_dump = True

    def next_dump(self) -> Optional[str]:
        """Name of the dump to request next ("route", "link" or "addr"), or None."""
        if self.dump_in_progress:
            return None
        for kind in ("route", "link", "addr"):
            attr = f"want_{kind}_dump"
            if getattr(self, attr):
                setattr(self, attr, False)
                self.dump_in_progress = True
                return kind
        return None

    def dump_done(self) -> Optional[str]:
        """Mark the running dump finished and return the next one to request."""
        self.dump_in_progress = False
        return self.next_dump()

    def apply_scan(self, bss: Mapping) -> bool:
        """Take Wi-Fi details from a scan result; False when it is not our BSS."""
        if not associated_or_joined(bss.get("status")):
            return False
        ies = bss.get("information_elements")
        if ies is not None:
            essid = parse_essid(ies)
            if essid is not None:
                self.essid = essid
        mbm = bss.get("signal_mbm")
        if mbm is not None:
            info = signal_from_mbm(mbm)
            self.signal_strength_dbm = info.dbm
            self.signal_strength = info.strength
            self.signal_strength_app = info.app
        unspec = bss.get("signal_unspec")
        if unspec is not None:
            self.signal_strength = unspec
        freq = bss.get("frequency")
        if freq is not None:
            self.frequency = freq / 1000
        return True

    def _icon(self, percentage: int, state: str) -> str:
        icons = self.config.get("format-icons")
        if isinstance(icons, dict):
            icons = icons.get(state, icons.get("default"))
        if isinstance(icons, str):
            return icons
        if isinstance(icons, list) and icons:
            index = min(len(icons) - 1, max(0, percentage * len(icons) // 100))
            value = icons[index]
            return value if isinstance(value, str) else ""
        return ""

    def _values(self, down: int, up: int, interval: int) -> dict:
        return {
            "essid": self.essid,
            "signaldBm": self.signal_strength_dbm,
            "signalStrength": self.signal_strength,
            "signalStrengthApp": self.signal_strength_app,
            "ifname": self.ifname,
            "netmask": self.netmask,
            "ipaddr": self.ipaddr,
            "gwaddr": self.gwaddr,
            "cidr": self.cidr,
            "frequency": f"{self.frequency:.1f}",
            "icon": self._icon(self.signal_strength, self.current_state),
            "bandwidthDownBits": _pow_format(down * 8 // interval, "b/s"),
            "bandwidthUpBits": _pow_format(up * 8 // interval, "b/s"),
            "bandwidthDownOctets": _pow_format(down // interval, "o/s"),
            "bandwidthUpOctets": _pow_format(up // interval, "o/s"),
        }

    def render(
        self, bandwidth_down: int = 0, bandwidth_up: int = 0, interval: Optional[int] = None
    ) -> Tuple[str, Optional[str]]:
        """Return the label text and tooltip (None when tooltips are off)."""
        if interval is None:
            interval = self.interval
        if interval <= 0:
            raise ValueError("interval must be positive")
        state = self.state()
        fmt = self.config.get(f"format-{state}")
        if not isinstance(fmt, str):
            fmt = self.config.get("format")
            if not isinstance(fmt, str):
                fmt = DEFAULT_FORMAT
        tooltip_format = self.config.get(f"tooltip-format-{state}")
        tooltip_format = tooltip_format if isinstance(tooltip_format, str) else ""
        self.current_state = state

        values = self._values(bandwidth_down, bandwidth_up, interval)
        text = fmt.format(**values)
        tooltip = None
        if self.config.get("tooltip", True):
            if not tooltip_format and isinstance(self.config.get("tooltip-format"), str):
                tooltip_format = self.config["tooltip-format"]
            tooltip = tooltip_format.format(**values) if tooltip_format else text
        return text, tooltip


def _encode_attrs(attrs: Iterable[Tuple[int, bytes]]) -> bytes:
    out = bytearray()
    for attr_type, payload in attrs:
        length = _RTATTR_HEADER.size + len(payload)
        out += _RTATTR_HEADER.pack(length, attr_type) + payload
        out += b"\x00" * (((length + 3) & ~3) - length)
    return bytes(out)