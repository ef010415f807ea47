# failover/orchestrator.py
from __future__ import annotations
from typing import Optional, List
from errors import NoActiveInterface, UnknownInterface
from failover.gateway import GatewayProbe
from failover.reconciler import Reconciler, ReconcileResult
from failover.store import ConfigStore, SnapshotKind
from network.probe import NetworkProbe
from network.snapshot import InterfaceSlot
from state import ReconciliationContext, Mode
from logger import log


class Orchestrator:
    """Walks the active interfaces in slot order and runs one pass on each."""

    def __init__(self, probe: NetworkProbe, store: ConfigStore,
                 gateway: GatewayProbe, context: ReconciliationContext) -> None:
        self._probe = probe
        self._store = store
        self.context = context
        self.reconciler = Reconciler(probe, store, gateway)

    @classmethod
    def from_context(cls, probe: NetworkProbe,
                     context: ReconciliationContext) -> "Orchestrator":
        gateway = GatewayProbe(probe, attempts=context.ping_attempts,
                               settle_delay=context.settle_delay)
        return cls(probe, ConfigStore(context.base_dir), gateway, context)

    def slots(self) -> List[InterfaceSlot]:
        handles = self._probe.list_active_interfaces()
        if not handles:
            raise NoActiveInterface("No active network interface found.")
        return [InterfaceSlot(number=n, handle=h) for n, h in enumerate(handles, 1)]

    @staticmethod
    def select(slots: List[InterfaceSlot],
               interface: Optional[str]) -> List[InterfaceSlot]:
        if interface is None or str(interface).lower() == "all":
            return slots
        try:
            number = int(interface)
        except ValueError:
            raise UnknownInterface(f"Invalid interface '{interface}'.") from None
        for slot in slots:
            if slot.number == number:
                return [slot]
        raise UnknownInterface(
            f"Interface {number} does not exist ({len(slots)} active)."
        )

    def run(self) -> List[ReconcileResult]:
        handler = {
            Mode.AUTO: self.reconciler.reconcile,
            Mode.DHCP: self.reconciler.force_dhcp,
            Mode.PRODUCTION: self.reconciler.force_production,
            Mode.DR: self.reconciler.force_dr,
        }[self.context.mode]
        selected = self.select(self.slots(), self.context.interface)
        log.info(f"Mode {self.context.mode.value}: {len(selected)} interface(s)")
        for slot in selected:
            self.context.results.append(handler(slot))
        return self.context.results

    def describe(self) -> List[str]:
        lines = []
        for slot in self.select(self.slots(), self.context.interface):
            live = self._probe.read_ipv4(slot.handle)
            stored = [
                kind.value for kind in SnapshotKind
                if self._store.exists(slot.number, kind)
            ]
            lines.append(
                f"{slot.number:<3} {slot.handle.name:<12} "
                f"{'DHCP' if live.is_dhcp else 'static':<7} "
                f"{live.snapshot.describe()}  "
                f"[{', '.join(stored) or 'no snapshots'}]"
            )
        return lines
