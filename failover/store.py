# failover/store.py
from __future__ import annotations
import csv
import enum
import io
import os
import tempfile
from pathlib import Path
from typing import Optional
from errors import PersistError, StoreReadError, SnapshotFormatError
from network.snapshot import IPv4Snapshot, CSV_FIELDS
from logger import log


class SnapshotKind(enum.Enum):
    PRODUCTION = "production"
    DR = "dr"
    PREVIOUS = "previous"

    @property
    def filename_template(self) -> str:
        return {
            SnapshotKind.PRODUCTION: "ipconfig-{n}.csv",
            SnapshotKind.DR: "dr_ipconfig-{n}.csv",
            SnapshotKind.PREVIOUS: "previous_ipconfig-{n}.csv",
        }[self]


class ConfigStore:
    """Per-slot snapshot files under one base directory."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)

    def path_for(self, slot: int, kind: SnapshotKind) -> Path:
        return self.base_dir / kind.filename_template.format(n=slot)

    def exists(self, slot: int, kind: SnapshotKind) -> bool:
        return self.path_for(slot, kind).is_file()

    # -- Read --------------------------------------------------------------

    def load(self, slot: int, kind: SnapshotKind) -> Optional[IPv4Snapshot]:
        path = self.path_for(slot, kind)
        try:
            text = path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            log.debug(f"No {kind.value} snapshot for interface {slot} ({path})")
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(f"Cannot read {path}: {e}") from e

        # Export-Csv writes a "#TYPE ..." line ahead of the header
        lines = [l for l in text.splitlines() if l.strip() and not l.startswith("#")]
        try:
            rows = list(csv.DictReader(lines))
        except csv.Error as e:
            raise StoreReadError(f"{path}: {e}") from e
        if not rows:
            raise StoreReadError(f"{path} holds no snapshot row.")
        try:
            snapshot = IPv4Snapshot.from_row(rows[0])
        except SnapshotFormatError as e:
            raise StoreReadError(f"{path}: {e}") from e
        for warning in snapshot.warnings():
            log.warning(f"{path}: {warning}")
        log.debug(f"Loaded {kind.value} snapshot for interface {slot}: "
                  f"{snapshot.describe()}")
        return snapshot

    # -- Write -------------------------------------------------------------

    def save(self, slot: int, kind: SnapshotKind, snapshot: IPv4Snapshot) -> None:
        if kind is SnapshotKind.DR:
            raise PersistError("DR snapshots are operator-provisioned and never written.")
        path = self.path_for(slot, kind)

        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS, lineterminator="\r\n")
        writer.writeheader()
        writer.writerow(snapshot.to_row())

        tmp_name = None
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.base_dir, prefix=f".{path.name}.", suffix=".tmp"
            )
            try:
                f = os.fdopen(fd, "w", newline="", encoding="utf-8")
            except OSError:
                os.close(fd)
                raise
            with f:
                f.write(buf.getvalue())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistError(f"Cannot write {path}: {e}") from e
        log.info(f"Saved {kind.value} snapshot for interface {slot}: "
                 f"{snapshot.describe()}")
