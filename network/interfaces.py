# network/interfaces.py
from __future__ import annotations
import subprocess
import json
from pathlib import Path
from typing import Optional, List, Tuple
from errors import ProbeReadError
from network.snapshot import IPv4Snapshot, LiveIPv4, InterfaceHandle
from validators import validate_dns
from logger import log

RESOLV_CONF = Path("/etc/resolv.conf")
CMD_TIMEOUT = 5

# Reported for an up interface that has no IPv4 address yet.
UNCONFIGURED = ("0.0.0.0", 0)


def _run_json(cmd: List[str]) -> list:
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=CMD_TIMEOUT
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProbeReadError(f"{' '.join(cmd)} failed: {e}") from e
    if result.returncode != 0:
        raise ProbeReadError(
            f"{' '.join(cmd)} exited {result.returncode}: {result.stderr.strip()}"
        )
    try:
        return json.loads(result.stdout or "[]")
    except ValueError as e:
        raise ProbeReadError(f"Unparseable output from {' '.join(cmd)}: {e}") from e


def _is_up(link: dict) -> bool:
    flags = link.get("flags", [])
    if "LOOPBACK" in flags or link.get("link_type") == "loopback":
        return False
    operstate = link.get("operstate", "")
    if operstate == "UP":
        return True
    # tun/ppp style devices never report UP but carry the link flags
    return operstate == "UNKNOWN" and "UP" in flags and "LOWER_UP" in flags


def list_up_interfaces() -> List[InterfaceHandle]:
    """Return the up, non-loopback interfaces sorted by OS interface index."""
    links = _run_json(["ip", "-j", "link", "show"])
    handles = [
        InterfaceHandle(index=int(link["ifindex"]), name=link["ifname"])
        for link in links
        if _is_up(link)
    ]
    # sorted() is stable, equal indexes keep the order ip reported them in
    return sorted(handles, key=lambda h: h.index)


def _read_address(iface: str) -> Tuple[Optional[str], int, bool]:
    data = _run_json(["ip", "-j", "-4", "addr", "show", "dev", iface])
    for entry in data:
        for ai in entry.get("addr_info", []):
            if ai.get("family") != "inet" or ai.get("scope", "global") == "host":
                continue
            return ai["local"], int(ai["prefixlen"]), bool(ai.get("dynamic"))
    return None, 0, False


def _read_gateway(iface: str) -> Tuple[Optional[str], bool]:
    routes = _run_json(["ip", "-j", "-4", "route", "show", "default", "dev", iface])
    for route in routes:
        gw = route.get("gateway")
        if gw:
            return gw, route.get("protocol") == "dhcp"
    return None, False


def _parse_resolvectl(output: str) -> List[str]:
    # "Link 2 (eth0): 10.0.0.2 10.0.0.3"
    _, _, servers = output.partition(":")
    return [s for s in servers.split() if validate_dns(s)[0]]


def _read_resolv_conf() -> List[str]:
    try:
        lines = RESOLV_CONF.read_text().splitlines()
    except OSError as e:
        log.debug(f"Cannot read {RESOLV_CONF}: {e}")
        return []
    servers = []
    for line in lines:
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "nameserver" and validate_dns(parts[1])[0]:
            servers.append(parts[1])
    return servers


def _read_dns(iface: str) -> List[str]:
    try:
        result = subprocess.run(
            ["resolvectl", "dns", iface],
            capture_output=True, text=True, timeout=CMD_TIMEOUT
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        log.debug(f"resolvectl failed for {iface}: {e}")
        return _read_resolv_conf()[:2]
    if result.returncode != 0:
        log.debug(f"resolvectl dns {iface}: {result.stderr.strip()}")
        return _read_resolv_conf()[:2]
    return _parse_resolvectl(result.stdout)[:2]


def read_ipv4(iface: str) -> LiveIPv4:
    address, prefix, dynamic = _read_address(iface)
    gateway, gw_from_dhcp = _read_gateway(iface)
    dns = _read_dns(iface)
    if address is None:
        # no lease yet: the interface is waiting on DHCP
        address, prefix = UNCONFIGURED
        dynamic = True
        gateway = None
    snapshot = IPv4Snapshot(
        address=address,
        prefix_length=prefix,
        gateway=gateway,
        primary_dns=dns[0] if dns else None,
        secondary_dns=dns[1] if len(dns) > 1 else None,
    )
    live = LiveIPv4(snapshot=snapshot, is_dhcp=dynamic or gw_from_dhcp)
    log.debug(f"{iface}: {snapshot.describe()} dhcp={live.is_dhcp}")
    return live
