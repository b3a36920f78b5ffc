#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PXE HTTP-boot chainload ProxyDHCP
- Answers PXE DISCOVERs (option 93) with a ProxyDHCP OFFER, no leases
- UEFI HTTPClient only: first request -> booter.efi, later ones -> kairos.efi
- Clients are told apart by their GUID (option 97), remembered until exit
"""

import argparse
import logging
import signal
import sys

from chainload import ChainloadTracker
from config import Config
from dhcp_proxy import ProxyDHCPServer
from logutil import setup_logging
from transport import SnooperTransport, TransportError


def main():
    ap = argparse.ArgumentParser(description="PXE HTTP-boot chainload ProxyDHCP")
    ap.add_argument("--iface", dest="iface", default=None,
                    help="Only listen on this interface (default: all)")
    ap.add_argument("--log-level", dest="log_level", default="DEBUG")
    args = ap.parse_args()

    cfg = Config(iface=args.iface, log_level=args.log_level)
    setup_logging(cfg.log_level)

    transport = SnooperTransport(cfg)
    try:
        transport.open()
    except TransportError as e:
        logging.error("Error creating DHCP connection: %s", e)
        sys.exit(2)

    def _stop(sig, _):
        logging.info("Signal %s received, shutting down...", sig)
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, _stop)

    server = ProxyDHCPServer(transport, ChainloadTracker(), cfg)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        transport.close()
        logging.info("ProxyDHCP stopped.")


if __name__ == "__main__":
    main()
