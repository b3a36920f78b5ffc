"""Tests for interface address selection."""

import socket
from collections import namedtuple
from ipaddress import IPv4Address

import pytest

import netutil
from netutil import NoUsableAddress, interface_address, interface_addresses, select_address

snicaddr = namedtuple("snicaddr", ["family", "address", "netmask", "broadcast", "ptp"])


class TestSelectAddress:
    """Tiered preference: global unicast, link-local, loopback."""

    def test_global_unicast_beats_link_local(self):
        assert select_address(["169.254.1.1", "10.0.0.5"]) == IPv4Address("10.0.0.5")

    def test_link_local_only(self):
        assert select_address(["169.254.1.1"]) == IPv4Address("169.254.1.1")

    def test_loopback_is_last_resort(self):
        assert select_address(["127.0.0.1", "169.254.7.7"]) == IPv4Address("169.254.7.7")
        assert select_address(["127.0.0.1"]) == IPv4Address("127.0.0.1")

    def test_first_match_in_tier_wins(self):
        addrs = ["192.168.1.10", "10.0.0.5", "203.0.113.9"]
        assert select_address(addrs) == IPv4Address("192.168.1.10")

    def test_no_ipv4_fails(self):
        with pytest.raises(NoUsableAddress):
            select_address(["fe80::1%eth0", "2001:db8::1"])

    def test_empty_fails(self):
        with pytest.raises(NoUsableAddress):
            select_address([])

    def test_unusable_ipv4_is_skipped(self):
        with pytest.raises(NoUsableAddress):
            select_address(["0.0.0.0", "224.0.0.1", "255.255.255.255"])

    def test_ipv4_mapped_ipv6_is_reduced(self):
        assert select_address(["::ffff:10.0.0.7"]) == IPv4Address("10.0.0.7")

    def test_garbage_entries_are_skipped(self):
        assert select_address(["52:54:00:12:34:56", "10.0.0.5"]) == IPv4Address("10.0.0.5")


class TestInterfaceAddress:
    """Address enumeration through psutil."""

    @pytest.fixture(autouse=True)
    def fake_interfaces(self, monkeypatch):
        table = {
            "eth0": [
                snicaddr(socket.AF_INET6, "fe80::5054:ff:fe12:3456%eth0", None, None, None),
                snicaddr(socket.AF_INET, "169.254.1.1", "255.255.0.0", None, None),
                snicaddr(socket.AF_INET, "192.168.1.10", "255.255.255.0", None, None),
            ],
            "v6only": [
                snicaddr(socket.AF_INET6, "2001:db8::1", None, None, None),
            ],
        }
        monkeypatch.setattr(netutil.psutil, "net_if_addrs", lambda: table)

    def test_addresses_in_os_order(self):
        assert interface_addresses("eth0") == [
            "fe80::5054:ff:fe12:3456%eth0", "169.254.1.1", "192.168.1.10",
        ]

    def test_selects_routable_address(self):
        assert interface_address("eth0") == IPv4Address("192.168.1.10")

    def test_ipv6_only_interface_fails(self):
        with pytest.raises(NoUsableAddress):
            interface_address("v6only")

    def test_unknown_interface_fails(self):
        with pytest.raises(NoUsableAddress, match="nosuch0"):
            interface_address("nosuch0")


class TestIfaceMac:
    def test_reports_interface_mac(self, monkeypatch):
        monkeypatch.setattr(netutil, "get_if_hwaddr", lambda iface: "52:54:00:aa:bb:cc")
        assert netutil.iface_mac("eth0") == "52:54:00:aa:bb:cc"

    def test_falls_back_when_unavailable(self, monkeypatch):
        def missing(iface):
            raise OSError("No such device")
        monkeypatch.setattr(netutil, "get_if_hwaddr", missing)
        assert netutil.iface_mac("nosuch0") == "02:00:5e:00:53:01"
