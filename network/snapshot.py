# network/snapshot.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, List, Dict
from errors import SnapshotFormatError
from validators import (
    validate_ip, validate_prefix, parse_prefix,
    validate_gateway_in_subnet, validate_dns,
)

# Column order of the per-interface snapshot files.
CSV_FIELDS = [
    "IPAddress",
    "PrefixLength",
    "IPv4DefaultGateway",
    "PrimaryDNSServer",
    "SecondaryDNSServer",
]


@dataclass(frozen=True)
class IPv4Snapshot:
    """One interface's IPv4 configuration at a point in time."""

    address: str
    prefix_length: int
    gateway: Optional[str] = None       # None = no default route
    primary_dns: Optional[str] = None
    secondary_dns: Optional[str] = None

    def __post_init__(self) -> None:
        ok, msg = validate_ip(self.address)
        if not ok:
            raise SnapshotFormatError(msg)
        ok, msg = validate_prefix(self.prefix_length)
        if not ok:
            raise SnapshotFormatError(msg)
        if self.gateway is not None:
            ok, msg = validate_ip(self.gateway)
            if not ok:
                raise SnapshotFormatError(f"Gateway: {msg}")
        for dns in (self.primary_dns, self.secondary_dns):
            if dns is not None:
                ok, msg = validate_dns(dns)
                if not ok:
                    raise SnapshotFormatError(msg)
        if self.secondary_dns is not None and self.primary_dns is None:
            raise SnapshotFormatError(
                "Secondary DNS server given without a primary DNS server."
            )

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix_length}"

    @property
    def dns_servers(self) -> List[str]:
        return [d for d in (self.primary_dns, self.secondary_dns) if d]

    def same_address(self, other: Optional["IPv4Snapshot"]) -> bool:
        return other is not None and self.address == other.address

    def warnings(self) -> List[str]:
        """Plausibility problems that do not make the snapshot unusable."""
        found = []
        ok, msg = validate_ip(self.address, prefix_len=self.prefix_length)
        if not ok:
            found.append(msg)
        if self.gateway is not None:
            ok, msg = validate_gateway_in_subnet(
                self.gateway, self.address, self.prefix_length
            )
            if not ok:
                found.append(msg)
        return found

    def describe(self) -> str:
        gw = self.gateway or "none"
        dns = ", ".join(self.dns_servers) or "none"
        return f"{self.cidr} gw={gw} dns={dns}"

    # -- CSV row conversion ------------------------------------------------

    @classmethod
    def from_row(cls, row: Dict[str, Optional[str]]) -> "IPv4Snapshot":
        def cell(name: str) -> Optional[str]:
            value = row.get(name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        address = cell("IPAddress")
        if address is None:
            raise SnapshotFormatError("IPAddress column is missing or empty.")
        ok, msg, prefix = parse_prefix(row.get("PrefixLength") or "")
        if not ok:
            raise SnapshotFormatError(msg)
        return cls(
            address=address,
            prefix_length=prefix,
            gateway=cell("IPv4DefaultGateway"),
            primary_dns=cell("PrimaryDNSServer"),
            secondary_dns=cell("SecondaryDNSServer"),
        )

    def to_row(self) -> Dict[str, str]:
        return {
            "IPAddress": self.address,
            "PrefixLength": str(self.prefix_length),
            "IPv4DefaultGateway": self.gateway or "",
            "PrimaryDNSServer": self.primary_dns or "",
            "SecondaryDNSServer": self.secondary_dns or "",
        }


@dataclass(frozen=True)
class LiveIPv4:
    """Result of reading an interface: its configuration plus DHCP state."""

    snapshot: IPv4Snapshot
    is_dhcp: bool


@dataclass(frozen=True)
class InterfaceHandle:
    index: int      # OS interface index
    name: str


@dataclass(frozen=True)
class InterfaceSlot:
    """Interface addressed by its 1-based position among the up interfaces."""

    number: int
    handle: InterfaceHandle

    def __str__(self) -> str:
        return f"{self.number} ({self.handle.name})"
