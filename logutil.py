import logging

SCAPY_LOGGER = "scapy.runtime"


def setup_logging(level: str = "DEBUG") -> int:
    """Configure root logging; scapy's own chatter only shows when debugging."""
    numeric = getattr(logging, level.upper(), logging.DEBUG)
    logging.basicConfig(
        level=numeric,
        format="[%(asctime)s] [%(levelname)s] %(message)s",
    )
    logging.getLogger(SCAPY_LOGGER).setLevel(
        logging.DEBUG if numeric <= logging.DEBUG else logging.ERROR)
    return numeric
