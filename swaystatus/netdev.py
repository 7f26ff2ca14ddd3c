"""Helpers for network status: byte counters, wildcard names, Wi-Fi details."""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, Tuple

_LOG = logging.getLogger(__name__)

NETDEV_FILE = "/proc/net/dev"

# Received bytes is the first counter, transmitted bytes the ninth.
_RX_BYTES_COLUMN = 0
_TX_BYTES_COLUMN = 8

_HARDWARE_OPTIMUM_DBM = -45
_HARDWARE_MIN_DBM = -90

_SSID_ELEMENT_ID = 0
_IE_HEADER_LEN = 2

_MARKUP_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
)

_APP_THRESHOLDS = (
    (-50, "Great Connectivity"),
    (-60, "Good Connectivity"),
    (-67, "Streaming"),
    (-70, "Web Surfing"),
    (-80, "Basic Connectivity"),
)
_APP_FALLBACK = "Poor Connectivity"


class BssStatus(IntEnum):
    """Association states a BSS can report."""

    AUTHENTICATED = 0
    ASSOCIATED = 1
    IBSS_JOINED = 2


@dataclass(frozen=True)
class SignalInfo:
    """Signal level in dBm, a 0-100 quality figure and a verbal rating."""

    dbm: int = 0
    strength: int = 0
    app: str = ""


def read_bandwidth_usage(
    check_interface: Callable[[str], bool], path: str = NETDEV_FILE
) -> Optional[Tuple[int, int]]:
    """Sum received and transmitted bytes of the interfaces accepted by ``check_interface``.

    Returns None when the counters file cannot be read.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as netdev:
            lines = netdev.read().splitlines()
    except OSError:
        _LOG.warning("Failed to open netdev file %s", path)
        return None

    received = transmitted = 0
    for line in lines[2:]:  # two header lines
        name, colon, counters = line.partition(":")
        if not colon:
            continue
        if not check_interface(name.strip()):
            continue
        columns = counters.split()
        received += _column(columns, _RX_BYTES_COLUMN)
        transmitted += _column(columns, _TX_BYTES_COLUMN)
    return received, transmitted


def _column(columns, index: int) -> int:
    try:
        return int(columns[index])
    except (IndexError, ValueError):
        return 0


def wildcard_match(pattern: str, text: str) -> bool:
    """Match ``text`` against ``pattern`` where ``*`` is any run and ``?`` any character."""
    p = t = 0
    fallback_p = fallback_t = -1
    while t < len(text):
        if p < len(pattern) and pattern[p] == "*":
            fallback_p, fallback_t = p, t
            p += 1
        elif p < len(pattern) and pattern[p] in ("?", text[t]):
            p += 1
            t += 1
        elif fallback_p >= 0:
            p = fallback_p + 1
            fallback_t += 1
            t = fallback_t
        else:
            return False
    while p < len(pattern) and pattern[p] == "*":
        p += 1
    return p == len(pattern)


def signal_from_mbm(mbm: int) -> SignalInfo:
    """Derive signal details from a level in mBm."""
    dbm = abs(mbm) // 100 * (1 if mbm >= 0 else -1)
    span = _HARDWARE_OPTIMUM_DBM - _HARDWARE_MIN_DBM
    # Too strong a signal is punished as much as too weak a one.
    strength = int(100 - abs(dbm - _HARDWARE_OPTIMUM_DBM) / span * 100)
    strength = min(max(strength, 0), 100)
    app = next((label for limit, label in _APP_THRESHOLDS if dbm >= limit), _APP_FALLBACK)
    return SignalInfo(dbm, strength, app)


def parse_essid(ies: bytes) -> Optional[str]:
    """Return the markup-escaped SSID from information elements, or None."""
    data = bytes(ies)
    offset = 0
    remaining = len(data)
    while remaining > _IE_HEADER_LEN and data[offset] != _SSID_ELEMENT_ID:
        step = data[offset + 1] + _IE_HEADER_LEN
        remaining -= step
        offset += step
    if remaining > _IE_HEADER_LEN and remaining > data[offset + 1] + _IE_HEADER_LEN:
        start = offset + _IE_HEADER_LEN
        raw = data[start:start + data[offset + 1]]
        return raw.decode("utf-8", errors="replace").translate(_MARKUP_ESCAPES)
    return None


def associated_or_joined(status: Optional[int]) -> bool:
    """Whether a BSS status means we are connected to it."""
    if status is None:
        return False
    return status in {member.value for member in BssStatus}


def prefix_to_netmask(family: int, prefixlen: int) -> str:
    """Return the netmask of a prefix length as an address string."""
    if family == socket.AF_INET:
        network = ipaddress.IPv4Network(f"0.0.0.0/{prefixlen}")
    elif family == socket.AF_INET6:
        network = ipaddress.IPv6Network(f"::/{prefixlen}")
    else:
        raise ValueError(f"unsupported address family {family}")
    return str(network.netmask)