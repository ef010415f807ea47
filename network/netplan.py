# network/netplan.py
from __future__ import annotations
import os
import subprocess
import yaml
from pathlib import Path
from network.snapshot import IPv4Snapshot
from logger import log

NETPLAN_DIR = "/etc/netplan"
FILENAME_TEMPLATE = "60-dr-ipswitch-{iface}.yaml"


class NetplanManager:
    """Keeps the applied configuration in a netplan file so it survives a reboot."""

    def __init__(self, netplan_dir: str = NETPLAN_DIR):
        self.netplan_dir = Path(netplan_dir)

    def path_for(self, iface: str) -> Path:
        return self.netplan_dir / FILENAME_TEMPLATE.format(iface=iface)

    # -- Write -------------------------------------------------------------

    def _write_yaml(self, iface: str, entry: dict) -> Path:
        config = {
            "network": {
                "version": 2,
                "renderer": "networkd",
                "ethernets": {iface: entry},
            }
        }
        path = self.path_for(iface)
        self.netplan_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)
        os.chmod(path, 0o600)
        log.info(f"Wrote netplan config to {path}")
        return path

    def write_static(self, iface: str, snapshot: IPv4Snapshot) -> Path:
        entry: dict = {
            "dhcp4": False,
            "addresses": [snapshot.cidr],
        }
        if snapshot.gateway:
            entry["routes"] = [{"to": "default", "via": snapshot.gateway}]
        if snapshot.dns_servers:
            entry["nameservers"] = {"addresses": snapshot.dns_servers}
        return self._write_yaml(iface, entry)

    def write_dhcp(self, iface: str) -> Path:
        return self._write_yaml(iface, {"dhcp4": True})

    # -- Apply -------------------------------------------------------------

    def apply(self) -> None:
        """Run `netplan apply`. Raises CalledProcessError/OSError on failure."""
        log.info("Running: netplan apply")
        subprocess.run(["netplan", "apply"], check=True, capture_output=True,
                       text=True, timeout=60)
