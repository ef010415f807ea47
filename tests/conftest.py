# tests/conftest.py
import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from errors import ApplyError, NoActiveInterface
from failover.gateway import GatewayProbe
from failover.store import ConfigStore
from network.probe import NetworkProbe
from network.snapshot import IPv4Snapshot, LiveIPv4, InterfaceHandle, InterfaceSlot
from state import ReconciliationContext


PROD = IPv4Snapshot("10.0.0.5", 24, "10.0.0.1", "10.0.0.2", "10.0.0.3")
DR = IPv4Snapshot("172.16.5.5", 24, "172.16.5.1", "172.16.5.2", "172.16.5.3")
DHCP_LEASE = IPv4Snapshot("192.168.1.77", 24, "192.168.1.1", "192.168.1.1")


class FakeNetworkProbe(NetworkProbe):
    """In-memory host. `reachable` is the set of gateways that answer ping."""

    def __init__(self, live=None, reachable=(), names=("eth0",)):
        self.handles = [InterfaceHandle(index=i + 2, name=n) for i, n in enumerate(names)]
        self.live = {h.name: l for h, l in zip(self.handles, live or [])}
        self.reachable = set(reachable)
        self.calls = []
        self.fail_apply = False

    def list_active_interfaces(self):
        if not self.handles:
            raise NoActiveInterface("No active network interface found.")
        return list(self.handles)

    def read_ipv4(self, handle):
        self.calls.append(("read", handle.name))
        return self.live[handle.name]

    def apply_static(self, handle, snapshot):
        self.calls.append(("static", handle.name, snapshot))
        if self.fail_apply:
            raise ApplyError("set address: boom")
        self.live[handle.name] = LiveIPv4(snapshot=snapshot, is_dhcp=False)

    def apply_dhcp(self, handle):
        self.calls.append(("dhcp", handle.name))
        if self.fail_apply:
            raise ApplyError("enable DHCP: boom")
        self.live[handle.name] = LiveIPv4(snapshot=DHCP_LEASE, is_dhcp=True)

    def ping(self, address, attempts=2):
        self.calls.append(("ping", address))
        return bool(address) and address in self.reachable

    @property
    def applied(self):
        return [c for c in self.calls if c[0] in ("static", "dhcp")]


def static(snapshot):
    return LiveIPv4(snapshot=snapshot, is_dhcp=False)


def dhcp(snapshot=DHCP_LEASE):
    return LiveIPv4(snapshot=snapshot, is_dhcp=True)


def write_dr(base_dir, snapshot, n=1):
    """Operator-provisioned DR file; the store itself refuses to write one."""
    row = snapshot.to_row()
    path = os.path.join(str(base_dir), f"dr_ipconfig-{n}.csv")
    with open(path, "w") as f:
        f.write("IPAddress,PrefixLength,IPv4DefaultGateway,PrimaryDNSServer,SecondaryDNSServer\n")
        f.write(",".join(row[k] for k in (
            "IPAddress", "PrefixLength", "IPv4DefaultGateway",
            "PrimaryDNSServer", "SecondaryDNSServer")) + "\n")
    return path


@pytest.fixture
def store(tmp_path):
    return ConfigStore(str(tmp_path))


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_gateway(sleeps):
    def _make(probe):
        return GatewayProbe(probe, attempts=2, settle_delay=10, sleep=sleeps.append)
    return _make


@pytest.fixture
def slot():
    return InterfaceSlot(number=1, handle=InterfaceHandle(index=2, name="eth0"))


@pytest.fixture
def context(tmp_path):
    return ReconciliationContext(base_dir=str(tmp_path), settle_delay=0)
