"""Shared fixtures: captured request frames built with scapy, default config."""

import pytest
from scapy.layers.dhcp import BOOTP, DHCP
from scapy.layers.inet import IP, UDP
from scapy.layers.l2 import Ether

from config import Config
from dhcp_packet import BootPacket

HTTP_VENDOR_CLASS = b"HTTPClient:Arch:00016:UNDI:003001"
CLIENT_MAC = b"\x52\x54\x00\x12\x34\x56"


def request_frame(msg_type=1, arch=b"\x00\x10", guid=None, vendor=HTTP_VENDOR_CLASS,
                  xid=0x12345678, mac=CLIENT_MAC, giaddr="0.0.0.0", dport=67):
    """A client request as it comes off the wire, dissected by scapy."""
    opts = [("message-type", msg_type)]
    if arch is not None:
        opts.append((93, arch))
    if guid is not None:
        opts.append((97, guid))
    if vendor is not None:
        opts.append((60, vendor))
    opts.append("end")
    frame = (
        Ether(src="52:54:00:12:34:56", dst="ff:ff:ff:ff:ff:ff")
        / IP(src="0.0.0.0", dst="255.255.255.255")
        / UDP(sport=68, dport=dport)
        / BOOTP(op=1, xid=xid, chaddr=mac, giaddr=giaddr)
        / DHCP(options=opts)
    )
    return Ether(bytes(frame))


@pytest.fixture
def make_request():
    """Factory returning a decoded BootPacket for a client request."""
    def _make(**kwargs):
        return BootPacket.from_scapy(request_frame(**kwargs))
    return _make


@pytest.fixture
def cfg():
    return Config()
