from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:
    """Runtime configuration for the chainload ProxyDHCP responder."""
    iface: Optional[str] = None  # None listens on every interface
    log_level: str = "DEBUG"

    # Fixed boot protocol parameters
    server_port: int = 67
    client_port: int = 68
    vendor_class_token: str = "HTTPClient"

    # HTTP bootfiles
    first_stage_file: str = "booter.efi"
    second_stage_file: str = "kairos.efi"
