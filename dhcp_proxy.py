import ipaddress
import logging
from typing import Callable, Optional

from chainload import ChainloadTracker
from config import Config
from dhcp_packet import (
    BOOTREPLY, DHCPDISCOVER, DHCPOFFER, FLAG_BROADCAST,
    OPT_BOOTFILE_NAME, OPT_CLIENT_ARCH, OPT_MESSAGE_TYPE, OPT_SERVER_ID, OPT_VENDOR_CLASS_ID,
    BootPacket, MalformedPacket,
)
from netutil import NoUsableAddress, interface_address
from transport import TransportError


class UnsupportedVendorClass(Exception):
    """Client did not announce a boot firmware we know how to answer."""


def boot_request_rejection(pkt: BootPacket) -> Optional[str]:
    """Why pkt is not a PXE boot request, or None if it is one."""
    if pkt.message_type != DHCPDISCOVER:
        return f"packet is message type {pkt.message_type}, not DHCPDISCOVER"
    if OPT_CLIENT_ARCH not in pkt.options:
        return f"not a PXE boot request (missing option {OPT_CLIENT_ARCH})"
    return None


def is_boot_request(pkt: BootPacket) -> bool:
    return boot_request_rejection(pkt) is None


def boot_url(server_ip, filename: str) -> str:
    return f"http://{server_ip}/{filename}"


def build_offer(request: BootPacket, server_ip: ipaddress.IPv4Address,
                served_before: bool, cfg: Config) -> BootPacket:
    """Build the ProxyDHCP offer pointing the client at the next boot image.

    A client that has not been served yet gets the first-stage loader; once
    that loader comes back with its own DISCOVER it gets the payload.
    """
    vendor_class = request.vendor_class
    logging.debug("Vendor class identifier: %s", vendor_class)
    if cfg.vendor_class_token not in vendor_class:
        raise UnsupportedVendorClass(f"unknown vendor class identifier: {vendor_class!r}")

    filename = cfg.second_stage_file if served_before else cfg.first_stage_file
    return BootPacket(
        op=BOOTREPLY,
        htype=request.htype,
        xid=request.xid,
        flags=FLAG_BROADCAST,
        hardware_addr=request.hardware_addr,
        giaddr=request.giaddr,
        siaddr=str(server_ip),
        options={
            OPT_MESSAGE_TYPE: bytes([DHCPOFFER]),
            OPT_SERVER_ID: server_ip.packed,
            OPT_VENDOR_CLASS_ID: cfg.vendor_class_token.encode("ascii"),
            OPT_BOOTFILE_NAME: boot_url(server_ip, filename).encode("ascii"),
        },
    )


class ProxyDHCPServer:
    """Receive -> classify -> resolve address -> pick stage -> offer -> send."""

    def __init__(self, transport, tracker: ChainloadTracker, cfg: Config,
                 address_for: Callable[[str], ipaddress.IPv4Address] = interface_address):
        self.transport = transport
        self.tracker = tracker
        self.cfg = cfg
        self.address_for = address_for

    def handle(self, pkt: BootPacket, iface: str) -> Optional[BootPacket]:
        """Decide on an offer for pkt, recording the client as served."""
        reason = boot_request_rejection(pkt)
        if reason:
            logging.debug("Ignoring packet from %s (%s): %s", pkt.mac, iface, reason)
            return None
        logging.info("Booting %s on %s (arch=%s)", pkt.mac, iface, pkt.client_arch)

        guid = pkt.guid
        logging.info("Client GUID: %s", guid.hex())

        try:
            server_ip = self.address_for(iface)
        except NoUsableAddress as e:
            logging.info("Want to boot %s on %s, but couldn't get a source address: %s",
                         pkt.mac, iface, e)
            return None

        served = self.tracker.has_been_served(guid)
        try:
            offer = build_offer(pkt, server_ip, served, self.cfg)
        except UnsupportedVendorClass as e:
            logging.info("Failed to construct ProxyDHCP offer for %s: %s", pkt.mac, e)
            return None

        if served:
            logging.info("Client %s was already served the first stage, serving %s",
                         pkt.mac, self.cfg.second_stage_file)
        else:
            logging.info("Client %s was not served the first stage, serving %s",
                         pkt.mac, self.cfg.first_stage_file)
            self.tracker.mark_served(guid)
        return offer

    def handle_one(self) -> None:
        try:
            pkt, iface = self.transport.receive()
        except (TransportError, MalformedPacket) as e:
            logging.error("Error receiving DHCP packet: %s", e)
            return
        logging.debug("Received packet from %s on %s", pkt.mac, iface)

        offer = self.handle(pkt, iface)
        if offer is None:
            return

        try:
            self.transport.send(offer, iface)
        except TransportError as e:
            logging.info("Failed to send ProxyDHCP offer for %s: %s", pkt.mac, e)
            return
        logging.debug("ProxyDHCP offer sent to %s on %s", pkt.mac, iface)

    def serve_forever(self) -> None:
        while True:
            self.handle_one()
