# tests/test_netplan.py
import stat
import pytest
import yaml
from unittest.mock import patch
from network.netplan import NetplanManager
from network.snapshot import IPv4Snapshot

@pytest.fixture
def tmp_netplan(tmp_path):
    """Return a NetplanManager pointed at a temp directory."""
    return NetplanManager(netplan_dir=str(tmp_path))

def test_write_static_config(tmp_netplan, tmp_path):
    snap = IPv4Snapshot("192.168.10.5", 24, "192.168.10.1", "8.8.8.8", "8.8.4.4")
    path = tmp_netplan.write_static("eth2", snap)
    assert path == tmp_path / "60-dr-ipswitch-eth2.yaml"
    data = yaml.safe_load(path.read_text())
    entry = data["network"]["ethernets"]["eth2"]
    assert entry["dhcp4"] is False
    assert entry["addresses"] == ["192.168.10.5/24"]
    assert entry["routes"] == [{"to": "default", "via": "192.168.10.1"}]
    assert entry["nameservers"] == {"addresses": ["8.8.8.8", "8.8.4.4"]}

def test_write_static_without_gateway_has_no_route(tmp_netplan):
    path = tmp_netplan.write_static("eth0", IPv4Snapshot("10.0.0.5", 24))
    entry = yaml.safe_load(path.read_text())["network"]["ethernets"]["eth0"]
    assert "routes" not in entry
    assert "nameservers" not in entry

def test_write_dhcp_config(tmp_netplan):
    path = tmp_netplan.write_dhcp("eth0")
    content = path.read_text()
    assert "dhcp4: true" in content
    assert "eth0" in content

def test_written_yaml_has_correct_permissions(tmp_netplan):
    path = tmp_netplan.write_dhcp("eth0")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600

def test_rewrite_replaces_previous_file(tmp_netplan, tmp_path):
    tmp_netplan.write_dhcp("eth0")
    tmp_netplan.write_static("eth0", IPv4Snapshot("10.0.0.5", 24))
    files = list(tmp_path.glob("*.yaml"))
    assert len(files) == 1
    assert "dhcp4: false" in files[0].read_text()

def test_apply_runs_netplan(tmp_netplan):
    with patch("network.netplan.subprocess.run") as run:
        tmp_netplan.apply()
    assert run.call_args[0][0] == ["netplan", "apply"]
    assert run.call_args[1]["check"] is True
