"""
BOOTP/DHCP message model used by the ProxyDHCP responder.

Requests arrive already dissected by scapy; BootPacket.from_scapy flattens
the BOOTP header and DHCP options into plain values keyed by option code.
Outgoing frames are assembled with scapy in transport.py.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from scapy.compat import bytes_encode
from scapy.layers.dhcp import BOOTP, DHCP, DHCPRevOptions
from scapy.packet import Packet

# ----------------- constants -----------------
BOOTREQUEST = 1
BOOTREPLY = 2

DHCPDISCOVER = 1
DHCPOFFER = 2

OPT_MESSAGE_TYPE = 53
OPT_SERVER_ID = 54
OPT_VENDOR_CLASS_ID = 60
OPT_BOOTFILE_NAME = 67
OPT_CLIENT_ARCH = 93
OPT_CLIENT_GUID = 97

FLAG_BROADCAST = 0x8000

ZERO_ADDR = "0.0.0.0"


class MalformedPacket(ValueError):
    """Datagram is not a decodable BOOTP/DHCP message."""


def _option_code_and_bytes(layer: DHCP, opt) -> Optional[tuple]:
    """Turn one scapy DHCP option entry back into (code, raw payload)."""
    if isinstance(opt, str):  # "pad" / "end"
        return None
    if not isinstance(opt, tuple) or len(opt) < 2:
        raise MalformedPacket(f"undecodable DHCP option data: {opt!r}")
    name, values = opt[0], opt[1:]
    if isinstance(name, int):
        return name, b"".join(bytes_encode(v) for v in values)
    if name not in DHCPRevOptions:
        raise MalformedPacket(f"unknown DHCP option {name!r}")
    code, fld = DHCPRevOptions[name]
    if fld is None:
        return code, b"".join(bytes_encode(v) for v in values)
    return code, b"".join(fld.addfield(layer, b"", fld.any2i(layer, v)) for v in values)


@dataclass
class BootPacket:
    op: int
    xid: int
    hardware_addr: bytes
    htype: int = 1
    flags: int = 0
    ciaddr: str = ZERO_ADDR
    yiaddr: str = ZERO_ADDR
    siaddr: str = ZERO_ADDR
    giaddr: str = ZERO_ADDR
    options: Dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def from_scapy(cls, pkt: Packet) -> "BootPacket":
        if BOOTP not in pkt:
            raise MalformedPacket("not a BOOTP message")
        if DHCP not in pkt:
            raise MalformedPacket("BOOTP message without DHCP options")
        bootp = pkt[BOOTP]
        if bootp.hlen > 16:
            raise MalformedPacket(f"hardware address length {bootp.hlen} out of range")

        options: Dict[int, bytes] = {}
        dhcp = pkt[DHCP]
        for opt in dhcp.options:
            decoded = _option_code_and_bytes(dhcp, opt)
            if decoded is None:
                continue
            code, value = decoded
            # RFC 3396: repeated codes are concatenated
            options[code] = options.get(code, b"") + value

        return cls(
            op=bootp.op,
            htype=bootp.htype,
            xid=bootp.xid,
            flags=int(bootp.flags),
            ciaddr=bootp.ciaddr,
            yiaddr=bootp.yiaddr,
            siaddr=bootp.siaddr,
            giaddr=bootp.giaddr,
            hardware_addr=bytes(bootp.chaddr)[:bootp.hlen],
            options=options,
        )

    @property
    def message_type(self) -> Optional[int]:
        value = self.options.get(OPT_MESSAGE_TYPE)
        return value[0] if value else None

    @property
    def broadcast(self) -> bool:
        return bool(self.flags & FLAG_BROADCAST)

    @property
    def relayed(self) -> bool:
        return self.giaddr != ZERO_ADDR

    @property
    def mac(self) -> str:
        return ":".join(f"{b:02x}" for b in self.hardware_addr)

    @property
    def guid(self) -> bytes:
        """Raw UUID/GUID client identifier, b"" when the client sent none."""
        return self.options.get(OPT_CLIENT_GUID, b"")

    @property
    def vendor_class(self) -> str:
        return self.options.get(OPT_VENDOR_CLASS_ID, b"").decode("ascii", errors="replace")

    @property
    def client_arch(self) -> Optional[int]:
        raw = self.options.get(OPT_CLIENT_ARCH)
        if raw is None or len(raw) < 2:
            return None
        return int.from_bytes(raw[:2], "big")
