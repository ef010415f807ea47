# state.py
from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Optional, List, Any

SETTLE_DELAY_SECONDS = 10
PING_ATTEMPTS = 2


class Mode(enum.Enum):
    AUTO = "auto"
    DHCP = "dhcp"
    PRODUCTION = "production"
    DR = "dr"


@dataclass
class ReconciliationContext:
    mode: Mode = Mode.AUTO
    # None or "all" = every active interface, otherwise a 1-based slot number
    interface: Optional[str] = None
    base_dir: str = ""
    settle_delay: float = SETTLE_DELAY_SECONDS
    ping_attempts: int = PING_ATTEMPTS

    # Filled in as interfaces are processed (ReconcileResult items)
    results: List[Any] = field(default_factory=list)
