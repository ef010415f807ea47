# errors.py
from __future__ import annotations


class ReconcileError(Exception):
    """Base class for conditions that end the run."""


class NoActiveInterface(ReconcileError):
    pass


class ProbeReadError(ReconcileError):
    pass


class ApplyError(ReconcileError):
    pass


class MissingSnapshot(ReconcileError):
    def __init__(self, slot: int, kind: str) -> None:
        super().__init__(f"No {kind} snapshot stored for interface {slot}.")
        self.slot = slot
        self.kind = kind


class UnknownInterface(ReconcileError):
    pass


class StoreReadError(ReconcileError):
    pass


class PersistError(Exception):
    """Snapshot write failed. Logged by callers, never fatal."""


class SnapshotFormatError(ValueError):
    pass
