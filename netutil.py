import ipaddress
import logging
import socket
from typing import Iterable, List, Optional

import psutil
from scapy.arch import get_if_hwaddr

_BROADCAST = ipaddress.IPv4Address("255.255.255.255")


class NoUsableAddress(Exception):
    """Interface has no IPv4 address a boot client could reach."""


def _is_global_unicast(ip: ipaddress.IPv4Address) -> bool:
    # RFC 1918 ranges count as global here, unlike ipaddress.is_global
    return not (ip.is_unspecified or ip.is_loopback or ip.is_link_local
                or ip.is_multicast or ip == _BROADCAST)


def _is_link_local_unicast(ip: ipaddress.IPv4Address) -> bool:
    return ip.is_link_local


def _is_loopback(ip: ipaddress.IPv4Address) -> bool:
    return ip.is_loopback


# Preference order: routable first, then link-local, then loopback.
_TIERS = (_is_global_unicast, _is_link_local_unicast, _is_loopback)


def _to_ipv4(addr: str) -> Optional[ipaddress.IPv4Address]:
    try:
        ip = ipaddress.ip_address(addr.split("%", 1)[0])
    except ValueError:
        return None
    if isinstance(ip, ipaddress.IPv6Address):
        return ip.ipv4_mapped
    return ip


def select_address(addresses: Iterable[str]) -> ipaddress.IPv4Address:
    """Pick the address to advertise, scanning tier by tier; first match wins."""
    candidates = [ip for ip in map(_to_ipv4, addresses) if ip is not None]
    for qualifies in _TIERS:
        for ip in candidates:
            if qualifies(ip):
                return ip
    raise NoUsableAddress("no usable unicast address configured on interface")


def interface_addresses(iface: str) -> List[str]:
    """All addresses bound to iface, in the order the OS reports them."""
    return [a.address for a in psutil.net_if_addrs().get(iface, [])
            if a.family in (socket.AF_INET, socket.AF_INET6)]


def interface_address(iface: str) -> ipaddress.IPv4Address:
    try:
        return select_address(interface_addresses(iface))
    except NoUsableAddress as e:
        raise NoUsableAddress(f"{e} {iface}") from None


def iface_mac(iface: str) -> str:
    try:
        mac = get_if_hwaddr(iface)
        if mac and mac != "00:00:00:00:00:00":
            return mac
    except Exception as e:  # noqa: BLE001
        logging.debug("No hardware address for %s: %s", iface, e)
    return "02:00:5e:00:53:01"
