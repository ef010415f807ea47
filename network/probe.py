# network/probe.py
from __future__ import annotations
import abc
import subprocess
from typing import List, Optional
from errors import ApplyError, NoActiveInterface
from network import interfaces
from network.checks import ping, PING_TIMEOUT
from network.netplan import NetplanManager, NETPLAN_DIR
from network.snapshot import IPv4Snapshot, LiveIPv4, InterfaceHandle
from logger import log


class NetworkProbe(abc.ABC):
    """What the reconciler needs from the host's network stack."""

    @abc.abstractmethod
    def list_active_interfaces(self) -> List[InterfaceHandle]:
        """Up interfaces sorted by OS index. Raises NoActiveInterface if none."""

    @abc.abstractmethod
    def read_ipv4(self, handle: InterfaceHandle) -> LiveIPv4:
        """Raises ProbeReadError on any OS-level failure."""

    @abc.abstractmethod
    def apply_static(self, handle: InterfaceHandle, snapshot: IPv4Snapshot) -> None:
        """Clear, set address/prefix/gateway, then DNS. Raises ApplyError."""

    @abc.abstractmethod
    def apply_dhcp(self, handle: InterfaceHandle) -> None:
        """Clear routes, enable DHCP, reset DNS. Raises ApplyError."""

    @abc.abstractmethod
    def ping(self, address: Optional[str], attempts: int = 2) -> bool:
        ...


def _run(cmd: List[str], step: str) -> None:
    log.debug(f"CMD: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True,
                                timeout=interfaces.CMD_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ApplyError(f"{step}: {' '.join(cmd)} failed: {e}") from e
    if result.returncode != 0:
        raise ApplyError(
            f"{step}: {' '.join(cmd)} exited {result.returncode}: "
            f"{result.stderr.strip()}"
        )


class LinuxNetworkProbe(NetworkProbe):
    """iproute2 + resolvectl + netplan."""

    def __init__(
        self,
        netplan_dir: str = NETPLAN_DIR,
        persist_netplan: bool = True,
        ping_timeout: float = PING_TIMEOUT,
    ) -> None:
        self._netplan = NetplanManager(netplan_dir)
        self._persist = persist_netplan
        self._ping_timeout = ping_timeout

    def list_active_interfaces(self) -> List[InterfaceHandle]:
        handles = interfaces.list_up_interfaces()
        if not handles:
            raise NoActiveInterface("No active network interface found.")
        return handles

    def read_ipv4(self, handle: InterfaceHandle) -> LiveIPv4:
        return interfaces.read_ipv4(handle.name)

    def _clear(self, iface: str) -> None:
        _run(["ip", "-4", "route", "flush", "dev", iface], "clear routes")
        _run(["ip", "-4", "addr", "flush", "dev", iface], "clear addresses")

    def apply_static(self, handle: InterfaceHandle, snapshot: IPv4Snapshot) -> None:
        iface = handle.name
        log.info(f"Applying static {snapshot.describe()} to {iface}")
        self._clear(iface)
        _run(["ip", "addr", "add", snapshot.cidr, "dev", iface], "set address")
        if snapshot.gateway:
            _run(["ip", "route", "replace", "default", "via", snapshot.gateway,
                  "dev", iface], "set gateway")
        if snapshot.dns_servers:
            _run(["resolvectl", "dns", iface, *snapshot.dns_servers], "set DNS")
        if self._persist:
            try:
                self._netplan.write_static(iface, snapshot)
            except OSError as e:
                raise ApplyError(f"persist netplan config for {iface}: {e}") from e

    def apply_dhcp(self, handle: InterfaceHandle) -> None:
        iface = handle.name
        log.info(f"Switching {iface} to DHCP")
        _run(["ip", "-4", "route", "flush", "dev", iface], "clear routes")
        try:
            self._netplan.write_dhcp(iface)
            self._netplan.apply()
        except subprocess.CalledProcessError as e:
            raise ApplyError(f"enable DHCP on {iface}: {e.stderr or e}") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ApplyError(f"enable DHCP on {iface}: {e}") from e
        _run(["resolvectl", "revert", iface], "reset DNS")

    def ping(self, address: Optional[str], attempts: int = 2) -> bool:
        return ping(address, attempts=attempts, timeout=self._ping_timeout)
