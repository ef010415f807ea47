# tests/test_interfaces.py
import json
import pytest
from unittest.mock import patch, MagicMock
import network.interfaces as interfaces_mod
from errors import ProbeReadError
from network.interfaces import list_up_interfaces, read_ipv4
from network.snapshot import InterfaceHandle

LINKS = [
    {"ifindex": 1, "ifname": "lo", "flags": ["LOOPBACK", "UP", "LOWER_UP"],
     "operstate": "UNKNOWN", "link_type": "loopback"},
    {"ifindex": 3, "ifname": "eth1", "flags": ["BROADCAST", "UP", "LOWER_UP"],
     "operstate": "UP", "link_type": "ether"},
    {"ifindex": 2, "ifname": "eth0", "flags": ["BROADCAST", "UP", "LOWER_UP"],
     "operstate": "UP", "link_type": "ether"},
    {"ifindex": 4, "ifname": "eth2", "flags": ["BROADCAST"],
     "operstate": "DOWN", "link_type": "ether"},
    {"ifindex": 5, "ifname": "tun0", "flags": ["POINTOPOINT", "UP", "LOWER_UP"],
     "operstate": "UNKNOWN", "link_type": "none"},
]


def _fake_system(outputs):
    """outputs: {command prefix tuple: (returncode, stdout)}"""
    def fake_run(cmd, **kw):
        for prefix, (rc, out) in outputs.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                return MagicMock(returncode=rc, stdout=out, stderr="err" if rc else "")
        raise FileNotFoundError(cmd[0])
    return fake_run


def _addr(local, prefix, dynamic=False):
    info = {"family": "inet", "local": local, "prefixlen": prefix, "scope": "global"}
    if dynamic:
        info["dynamic"] = True
    return json.dumps([{"ifindex": 2, "ifname": "eth0", "addr_info": [info]}])


def test_list_up_interfaces_sorted_by_index():
    fake = _fake_system({("ip", "-j", "link"): (0, json.dumps(LINKS))})
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        handles = list_up_interfaces()
    assert handles == [
        InterfaceHandle(2, "eth0"),
        InterfaceHandle(3, "eth1"),
        InterfaceHandle(5, "tun0"),
    ]

def test_list_up_interfaces_command_failure():
    fake = _fake_system({("ip", "-j", "link"): (1, "")})
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        with pytest.raises(ProbeReadError):
            list_up_interfaces()

def test_read_static_config():
    fake = _fake_system({
        ("ip", "-j", "-4", "addr"): (0, _addr("10.0.0.5", 24)),
        ("ip", "-j", "-4", "route"): (0, json.dumps(
            [{"dst": "default", "gateway": "10.0.0.1", "protocol": "static"}])),
        ("resolvectl", "dns"): (0, "Link 2 (eth0): 10.0.0.2 10.0.0.3 fe80::1\n"),
    })
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        live = read_ipv4("eth0")
    assert live.is_dhcp is False
    assert live.snapshot.cidr == "10.0.0.5/24"
    assert live.snapshot.gateway == "10.0.0.1"
    assert live.snapshot.dns_servers == ["10.0.0.2", "10.0.0.3"]

def test_read_dhcp_lease():
    fake = _fake_system({
        ("ip", "-j", "-4", "addr"): (0, _addr("192.168.1.77", 24, dynamic=True)),
        ("ip", "-j", "-4", "route"): (0, json.dumps(
            [{"dst": "default", "gateway": "192.168.1.1", "protocol": "dhcp"}])),
        ("resolvectl", "dns"): (0, "Link 2 (eth0): 192.168.1.1\n"),
    })
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        live = read_ipv4("eth0")
    assert live.is_dhcp is True
    assert live.snapshot.primary_dns == "192.168.1.1"
    assert live.snapshot.secondary_dns is None

def test_interface_without_address_is_waiting_on_dhcp():
    fake = _fake_system({
        ("ip", "-j", "-4", "addr"): (0, json.dumps([{"ifname": "eth0", "addr_info": []}])),
        ("ip", "-j", "-4", "route"): (0, "[]"),
        ("resolvectl", "dns"): (0, "Link 2 (eth0):\n"),
    })
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        live = read_ipv4("eth0")
    assert live.is_dhcp is True
    assert live.snapshot.address == "0.0.0.0"
    assert live.snapshot.gateway is None

def test_dns_falls_back_to_resolv_conf(tmp_path, monkeypatch):
    resolv = tmp_path / "resolv.conf"
    resolv.write_text("search example.com\nnameserver 10.0.0.2\nnameserver ::1\n"
                      "nameserver 10.0.0.3\nnameserver 10.0.0.4\n")
    monkeypatch.setattr(interfaces_mod, "RESOLV_CONF", resolv)
    fake = _fake_system({
        ("ip", "-j", "-4", "addr"): (0, _addr("10.0.0.5", 24)),
        ("ip", "-j", "-4", "route"): (0, "[]"),
    })
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        live = read_ipv4("eth0")
    assert live.snapshot.dns_servers == ["10.0.0.2", "10.0.0.3"]
    assert live.snapshot.gateway is None

def test_read_failure_raises_probe_read_error():
    fake = _fake_system({("ip", "-j", "-4", "addr"): (0, "not json")})
    with patch("network.interfaces.subprocess.run", side_effect=fake):
        with pytest.raises(ProbeReadError):
            read_ipv4("eth0")
