# settings.py
from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
import yaml
from network.checks import PING_TIMEOUT
from network.netplan import NETPLAN_DIR
from state import SETTLE_DELAY_SECONDS, PING_ATTEMPTS
from logger import log

CONFIG_FILE = Path("/etc/dr-ipswitch/config.yaml")
DEFAULT_BASE_DIR = "c:\\" if os.name == "nt" else "/var/lib/dr-ipswitch"


@dataclass
class Settings:
    base_dir: str = DEFAULT_BASE_DIR
    settle_delay: float = SETTLE_DELAY_SECONDS
    ping_attempts: int = PING_ATTEMPTS
    ping_timeout: float = PING_TIMEOUT
    netplan_dir: str = NETPLAN_DIR
    persist_netplan: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.base_dir, str) or not self.base_dir:
            raise ValueError("base_dir must be a non-empty path.")
        if isinstance(self.settle_delay, bool) or \
                not isinstance(self.settle_delay, (int, float)) or self.settle_delay < 0:
            raise ValueError(f"settle_delay must be >= 0, got {self.settle_delay!r}.")
        if isinstance(self.ping_attempts, bool) or \
                not isinstance(self.ping_attempts, int) or self.ping_attempts < 1:
            raise ValueError(f"ping_attempts must be >= 1, got {self.ping_attempts!r}.")
        if isinstance(self.ping_timeout, bool) or \
                not isinstance(self.ping_timeout, (int, float)) or self.ping_timeout <= 0:
            raise ValueError(f"ping_timeout must be > 0, got {self.ping_timeout!r}.")
        if not isinstance(self.persist_netplan, bool):
            raise ValueError("persist_netplan must be true or false.")


def load_settings(path: Path = CONFIG_FILE) -> Settings:
    """Read the YAML settings file. A missing file means defaults."""
    path = Path(path)
    if not path.exists():
        log.debug(f"No settings file at {path}, using defaults")
        return Settings()
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level.")

    known = {f.name for f in fields(Settings)}
    for key in sorted(set(data) - known):
        log.warning(f"{path}: ignoring unknown setting '{key}'")
    settings = Settings(**{k: v for k, v in data.items() if k in known})
    log.info(f"Loaded settings from {path}")
    return settings
