# validators.py
from __future__ import annotations
import ipaddress
from typing import Tuple

def validate_ip(address: str, prefix_len: int = None) -> Tuple[bool, str]:
    try:
        ip = ipaddress.IPv4Address(address)
    except ValueError:
        return False, f"'{address}' is not a valid IPv4 address."

    if prefix_len is not None and prefix_len < 31:
        net = ipaddress.IPv4Network(f"{address}/{prefix_len}", strict=False)
        if prefix_len and ip == net.network_address:
            return False, f"{address} is the network address of {net}."
        if prefix_len and ip == net.broadcast_address:
            return False, f"{address} is the broadcast address of {net}."

    return True, ""

def validate_prefix(prefix_len: int) -> Tuple[bool, str]:
    if isinstance(prefix_len, bool) or not isinstance(prefix_len, int) \
            or not (0 <= prefix_len <= 32):
        return False, f"Prefix length must be 0-32, got {prefix_len}."
    return True, ""

def parse_prefix(value: str) -> Tuple[bool, str, int]:
    """Parse a prefix length cell such as '24'. Returns (ok, msg, prefix)."""
    text = (value or "").strip()
    if not text.isdigit():
        return False, f"Prefix length must be a number, got '{value}'.", -1
    prefix = int(text)
    ok, msg = validate_prefix(prefix)
    return ok, msg, prefix

def validate_gateway_in_subnet(
    gateway: str, host_ip: str, prefix_len: int
) -> Tuple[bool, str]:
    try:
        gw = ipaddress.IPv4Address(gateway)
        net = ipaddress.IPv4Network(f"{host_ip}/{prefix_len}", strict=False)
    except ValueError as e:
        return False, str(e)

    if gw not in net:
        return False, f"Gateway {gateway} is not in subnet {net}."
    return True, ""

def validate_dns(address: str) -> Tuple[bool, str]:
    try:
        ipaddress.IPv4Address(address)
        return True, ""
    except ValueError:
        return False, f"'{address}' is not a valid DNS server IP."
