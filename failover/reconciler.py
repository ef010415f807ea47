# failover/reconciler.py
"""
Per-interface decision logic.

Each pass looks at the live configuration, the stored production / DR
snapshots and the snapshot recorded at the end of the previous run, applies
at most the configuration the situation calls for, and finishes by recording
what the interface is running now as the new "previous" snapshot.

The previous snapshot is the only memory of which branch ran last time:
  previous == production  -> we were on production, a fault means fail over
  previous == DR          -> we were on DR, a fault means go back
  anything else           -> unknown, escalate by probing gateways
"""
from __future__ import annotations
import enum
from dataclasses import dataclass
from errors import MissingSnapshot, PersistError
from failover.gateway import GatewayProbe
from failover.store import ConfigStore, SnapshotKind
from network.probe import NetworkProbe
from network.snapshot import IPv4Snapshot, LiveIPv4, InterfaceSlot
from logger import log


class Action(enum.Enum):
    NONE = "no change"
    APPLIED_PRODUCTION = "applied production"
    APPLIED_DR = "applied DR"
    RESTORED_LIVE = "restored original configuration"
    APPLIED_DHCP = "switched to DHCP"
    BOOTSTRAPPED_PRODUCTION = "recorded production baseline"
    REFRESHED_PRODUCTION = "refreshed production baseline"


@dataclass
class ReconcileResult:
    slot: InterfaceSlot
    action: Action
    previous: IPv4Snapshot      # recorded as the new previous snapshot

    def __str__(self) -> str:
        return (f"Interface {self.slot}: {self.action.value}, "
                f"now {self.previous.describe()}")


class Reconciler:
    def __init__(self, probe: NetworkProbe, store: ConfigStore,
                 gateway: GatewayProbe) -> None:
        self._probe = probe
        self._store = store
        self._gateway = gateway

    # -- Explicit modes ----------------------------------------------------

    def force_dhcp(self, slot: InterfaceSlot) -> ReconcileResult:
        log.info(f"Interface {slot}: forcing DHCP")
        self._probe.apply_dhcp(slot.handle)
        return self._finish(slot, Action.APPLIED_DHCP)

    def force_production(self, slot: InterfaceSlot) -> ReconcileResult:
        prod = self._store.load(slot.number, SnapshotKind.PRODUCTION)
        if prod is None:
            raise MissingSnapshot(slot.number, SnapshotKind.PRODUCTION.value)
        self._apply(slot, prod, "forced production")
        return self._finish(slot, Action.APPLIED_PRODUCTION)

    def force_dr(self, slot: InterfaceSlot) -> ReconcileResult:
        dr = self._store.load(slot.number, SnapshotKind.DR)
        if dr is None:
            raise MissingSnapshot(slot.number, SnapshotKind.DR.value)
        self._apply(slot, dr, "forced DR")
        return self._finish(slot, Action.APPLIED_DR)

    # -- Automatic mode ----------------------------------------------------

    def reconcile(self, slot: InterfaceSlot) -> ReconcileResult:
        live = self._probe.read_ipv4(slot.handle)
        prod = self._store.load(slot.number, SnapshotKind.PRODUCTION)
        dr = self._store.load(slot.number, SnapshotKind.DR)
        prev = self._store.load(slot.number, SnapshotKind.PREVIOUS)
        log.info(
            f"Interface {slot}: live {live.snapshot.describe()} "
            f"({'DHCP' if live.is_dhcp else 'static'}); "
            f"production={'yes' if prod else 'no'} dr={'yes' if dr else 'no'} "
            f"previous={prev.address if prev else 'none'}"
        )
        if live.is_dhcp:
            action = self._from_dhcp(slot, live, prod, dr, prev)
        else:
            action = self._from_static(slot, live, prod, dr, prev)
        return self._finish(slot, action)

    def _from_dhcp(self, slot, live: LiveIPv4, prod, dr, prev) -> Action:
        if dr is None:
            if prod is None:
                log.info(f"Interface {slot}: on DHCP with no stored static "
                         "configuration, leaving it alone")
                return Action.NONE
            self._apply(slot, prod, "interface fell back to DHCP")
            return Action.APPLIED_PRODUCTION

        if prod is None or prev is None:
            log.warning(
                f"Interface {slot}: DR snapshot present but "
                f"{'production' if prod is None else 'previous'} snapshot "
                "missing, cannot tell which side to switch to"
            )
            return Action.NONE

        if prev.same_address(prod):
            self._apply(slot, dr, "DHCP after production run, failing over")
            return Action.APPLIED_DR
        if prev.same_address(dr):
            self._apply(slot, prod, "DHCP after DR run, recovering")
            return Action.APPLIED_PRODUCTION
        return self._escalate_from_dhcp(slot, live, prod, dr)

    def _escalate_from_dhcp(self, slot, live: LiveIPv4,
                            prod: IPv4Snapshot, dr: IPv4Snapshot) -> Action:
        log.info(f"Interface {slot}: previous state unknown, probing gateways")
        if self._gateway.is_reachable(live.snapshot.gateway):
            return Action.NONE
        self._apply(slot, dr, "live gateway down")
        if self._gateway.settle_and_check(dr.gateway):
            return Action.APPLIED_DR
        self._apply(slot, prod, "DR gateway down, restoring production")
        return Action.APPLIED_PRODUCTION

    def _from_static(self, slot, live: LiveIPv4, prod, dr, prev) -> Action:
        if prod is not None and dr is not None:
            if self._gateway.is_reachable(live.snapshot.gateway):
                return Action.NONE
            if prev is not None and prev.same_address(prod):
                self._apply(slot, dr, "gateway down on production")
                return Action.APPLIED_DR
            if prev is not None and prev.same_address(dr):
                self._apply(slot, prod, "gateway down on DR")
                return Action.APPLIED_PRODUCTION
            return self._escalate_from_static(slot, live, prod, dr)

        if prod is None:
            log.info(f"Interface {slot}: no production snapshot, "
                     "recording the live configuration as production")
            self._persist(slot, SnapshotKind.PRODUCTION, live.snapshot)
            return Action.BOOTSTRAPPED_PRODUCTION

        if dr is None and not prod.same_address(live.snapshot):
            # Overwrites the baseline without confirmation, see DESIGN.md
            log.warning(
                f"Interface {slot}: live address {live.snapshot.address} differs "
                f"from production {prod.address}, replacing the production snapshot"
            )
            self._persist(slot, SnapshotKind.PRODUCTION, live.snapshot)
            return Action.REFRESHED_PRODUCTION
        return Action.NONE

    def _escalate_from_static(self, slot, live: LiveIPv4,
                              prod: IPv4Snapshot, dr: IPv4Snapshot) -> Action:
        log.info(f"Interface {slot}: previous state unknown, escalating")
        original = live.snapshot
        self._apply(slot, prod, "trying production")
        if self._gateway.settle_and_check(prod.gateway):
            return Action.APPLIED_PRODUCTION
        self._apply(slot, dr, "production gateway down, trying DR")
        if self._gateway.settle_and_check(dr.gateway):
            return Action.APPLIED_DR
        log.warning(f"Interface {slot}: no gateway answered, "
                    "restoring the configuration found at start")
        self._apply(slot, original, "last resort")
        return Action.RESTORED_LIVE

    # -- Helpers -----------------------------------------------------------

    def _apply(self, slot: InterfaceSlot, snapshot: IPv4Snapshot, reason: str) -> None:
        log.info(f"Interface {slot}: {reason}, applying {snapshot.describe()}")
        self._probe.apply_static(slot.handle, snapshot)

    def _persist(self, slot: InterfaceSlot, kind: SnapshotKind,
                 snapshot: IPv4Snapshot) -> None:
        try:
            self._store.save(slot.number, kind, snapshot)
        except PersistError as e:
            log.error(f"Interface {slot}: {e}")

    def _finish(self, slot: InterfaceSlot, action: Action) -> ReconcileResult:
        current = self._probe.read_ipv4(slot.handle).snapshot
        self._persist(slot, SnapshotKind.PREVIOUS, current)
        result = ReconcileResult(slot=slot, action=action, previous=current)
        log.info(str(result))
        return result
