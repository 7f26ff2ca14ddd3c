import ipaddress
import socket

import pytest

from swaystatus.netdev import (
    BssStatus,
    SignalInfo,
    associated_or_joined,
    parse_essid,
    prefix_to_netmask,
    read_bandwidth_usage,
    signal_from_mbm,
    wildcard_match,
)

HEADER = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast|"
    "bytes    packets errs drop fifo colls carrier compressed\n"
)


def _netdev_line(name, rx, tx):
    return f"{name:>6}: {rx} 10 0 0 0 0 0 0 {tx} 20 0 0 0 0 0 0\n"


@pytest.fixture
def netdev_file(tmp_path):
    path = tmp_path / "dev"
    path.write_text(
        HEADER
        + _netdev_line("lo", 111, 222)
        + _netdev_line("eth0", 1000, 2000)
        + _netdev_line("eth1", 3000, 4000)
    )
    return str(path)


def test_bandwidth_single_interface(netdev_file):
    assert read_bandwidth_usage(lambda name: name == "eth0", netdev_file) == (1000, 2000)


def test_bandwidth_sums_matching_interfaces(netdev_file):
    result = read_bandwidth_usage(lambda name: wildcard_match("eth*", name), netdev_file)
    assert result == (1000 + 3000, 2000 + 4000)


def test_bandwidth_no_match_is_zero(netdev_file):
    assert read_bandwidth_usage(lambda name: False, netdev_file) == (0, 0)


def test_bandwidth_missing_file(tmp_path):
    assert read_bandwidth_usage(lambda name: True, str(tmp_path / "absent")) is None


@pytest.mark.parametrize(
    "pattern,text,expected",
    [
        ("eth0", "eth0", True),
        ("eth*", "eth0", True),
        ("*", "anything", True),
        ("wl?0", "wlp0", True),
        ("wl?0", "wlp1", False),
        ("eth*", "wlan0", False),
        ("e*0", "enp3s0", True),
        ("e*0*", "enp3s0", True),
        ("eth", "eth0", False),
        ("eth0x", "eth0", False),
    ],
)
def test_wildcard_match(pattern, text, expected):
    assert wildcard_match(pattern, text) is expected


def test_signal_optimum_is_full_strength():
    info = signal_from_mbm(-4500)
    assert info == SignalInfo(-45, 100, "Great Connectivity")


def test_signal_minimum_is_zero_strength():
    info = signal_from_mbm(-9000)
    assert info.dbm == -90
    assert info.strength == 0
    assert info.app == "Poor Connectivity"


@pytest.mark.parametrize(
    "mbm,app",
    [
        (-5000, "Great Connectivity"),
        (-6000, "Good Connectivity"),
        (-6700, "Streaming"),
        (-7000, "Web Surfing"),
        (-8000, "Basic Connectivity"),
        (-8100, "Poor Connectivity"),
    ],
)
def test_signal_ratings(mbm, app):
    assert signal_from_mbm(mbm).app == app


@pytest.mark.parametrize("mbm", [-12000, -9900, -6000, -3000, 0, 2000])
def test_signal_strength_is_clamped(mbm):
    assert 0 <= signal_from_mbm(mbm).strength <= 100


def test_signal_symmetric_around_optimum():
    assert signal_from_mbm(-3500).strength == signal_from_mbm(-5500).strength


def test_essid_first_element():
    assert parse_essid(b"\x00\x04home" + b"\x01\x02ab") == "home"


def test_essid_after_other_elements():
    ies = b"\x03\x01\x06" + b"\x00\x03net" + b"\x01\x01x"
    assert parse_essid(ies) == "net"


def test_essid_is_escaped():
    assert parse_essid(b"\x00\x03a&b" + b"\x01\x01x") == "a&amp;b"


def test_essid_at_end_is_rejected():
    assert parse_essid(b"\x00\x04home") is None


def test_essid_missing():
    assert parse_essid(b"\x01\x02ab\x03\x01\x06") is None
    assert parse_essid(b"") is None


@pytest.mark.parametrize("status", list(BssStatus))
def test_associated_states(status):
    assert associated_or_joined(int(status)) is True


@pytest.mark.parametrize("status", [None, 3, 99])
def test_not_associated(status):
    assert associated_or_joined(status) is False


def test_netmask_ipv4():
    assert prefix_to_netmask(socket.AF_INET, 24) == "255.255.255.0"


def test_netmask_ipv6():
    assert prefix_to_netmask(socket.AF_INET6, 64) == "ffff:ffff:ffff:ffff::"


@pytest.mark.parametrize("prefix", [0, 8, 17, 32])
def test_netmask_ipv4_prefix_round_trip(prefix):
    mask = prefix_to_netmask(socket.AF_INET, prefix)
    assert ipaddress.IPv4Network(f"0.0.0.0/{mask}").prefixlen == prefix


def test_netmask_bad_prefix():
    with pytest.raises(ValueError):
        prefix_to_netmask(socket.AF_INET, 33)


def test_netmask_bad_family():
    with pytest.raises(ValueError):
        prefix_to_netmask(-1, 8)