"""
Raw DHCP capture and transmission on top of scapy.

Listens on every interface (or the configured one) for datagrams sent to the
DHCP server port and remembers which interface each one arrived on, so the
reply can be sent back out the same way.
"""

import logging
from typing import Dict, Optional, Tuple

from scapy.arch import get_if_list
from scapy.config import conf
from scapy.error import Scapy_Exception
from scapy.layers.dhcp import BOOTP, DHCP
from scapy.layers.inet import IP, UDP
from scapy.layers.l2 import Ether
from scapy.packet import Packet
from scapy.sendrecv import send, sendp, sniff

from config import Config
from dhcp_packet import BootPacket
from netutil import iface_mac


class TransportError(Exception):
    """Capture or transmission failed."""


class SnooperTransport:
    def __init__(self, cfg: Config):
        self.cfg = cfg
        self._sockets: Dict[object, str] = {}

    def open(self) -> "SnooperTransport":
        ifaces = [self.cfg.iface] if self.cfg.iface else get_if_list()
        try:
            for iface in ifaces:
                self._sockets[conf.L2listen(iface=iface)] = iface
        except (OSError, Scapy_Exception) as e:
            self.close()
            raise TransportError(f"cannot listen on {ifaces}: {e}") from e
        logging.info("Listening for DHCP packets on %s (udp %d)",
                     ", ".join(ifaces), self.cfg.server_port)
        return self

    def close(self) -> None:
        for sock in self._sockets:
            try:
                sock.close()
            except OSError as e:
                logging.debug("Error closing capture socket: %s", e)
        self._sockets.clear()

    def _is_dhcp_request(self, pkt: Packet) -> bool:
        return UDP in pkt and pkt[UDP].dport == self.cfg.server_port

    def receive(self) -> Tuple[BootPacket, str]:
        """Block until the next DHCP request; return it with its interface."""
        if not self._sockets:
            raise TransportError("transport is not open")
        try:
            captured = sniff(opened_socket=self._sockets, count=1, store=True,
                             lfilter=self._is_dhcp_request)
        except (OSError, Scapy_Exception) as e:
            raise TransportError(f"receive failed: {e}") from e
        if not captured:
            raise TransportError("capture ended without a packet")
        pkt = captured[0]
        iface: Optional[str] = getattr(pkt, "sniffed_on", None)
        if iface not in self._sockets.values():
            iface = next(iter(self._sockets.values()))
        return BootPacket.from_scapy(pkt), iface

    def build_frame(self, packet: BootPacket, iface: str) -> Packet:
        """Encode a reply; unicast to the relay agent when the request was relayed."""
        bootp = BOOTP(
            op=packet.op,
            htype=packet.htype,
            hlen=len(packet.hardware_addr),
            xid=packet.xid,
            flags=packet.flags,
            ciaddr=packet.ciaddr,
            yiaddr=packet.yiaddr,
            siaddr=packet.siaddr,
            giaddr=packet.giaddr,
            chaddr=packet.hardware_addr,
        )
        opts = [(code, value) for code, value in packet.options.items()]
        opts.append("end")
        payload = bootp / DHCP(options=opts)

        if packet.relayed:
            return (
                IP(src=packet.siaddr, dst=packet.giaddr, ttl=64)
                / UDP(sport=self.cfg.server_port, dport=self.cfg.server_port)
                / payload
            )
        return (
            Ether(src=iface_mac(iface), dst="ff:ff:ff:ff:ff:ff")
            / IP(src=packet.siaddr, dst="255.255.255.255", ttl=64)
            / UDP(sport=self.cfg.server_port, dport=self.cfg.client_port)
            / payload
        )

    def send(self, packet: BootPacket, iface: str) -> None:
        frame = self.build_frame(packet, iface)
        try:
            if packet.relayed:
                send(frame, verbose=0)
            else:
                sendp(frame, iface=iface, verbose=0)
        except (OSError, Scapy_Exception) as e:
            raise TransportError(f"send on {iface} failed: {e}") from e
