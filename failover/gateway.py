# failover/gateway.py
from __future__ import annotations
import time
from typing import Optional, Callable
from network.probe import NetworkProbe
from state import SETTLE_DELAY_SECONDS, PING_ATTEMPTS
from logger import log


class GatewayProbe:
    """
    Reachability checks used while escalating production -> DR -> restore.
    After a configuration change the stack needs `settle_delay` seconds
    before a ping says anything about the new gateway.
    """

    def __init__(
        self,
        probe: NetworkProbe,
        attempts: int = PING_ATTEMPTS,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._probe = probe
        self.attempts = attempts
        self.settle_delay = settle_delay
        self._sleep = sleep

    def is_reachable(self, gateway: Optional[str]) -> bool:
        if not gateway:
            log.info("No gateway configured, treating as unreachable")
            return False
        reachable = self._probe.ping(gateway, attempts=self.attempts)
        log.info("Gateway %s %s", gateway, "reachable" if reachable else "unreachable")
        return reachable

    def settle_and_check(self, gateway: Optional[str]) -> bool:
        log.info("Waiting %ss for the interface to settle", self.settle_delay)
        self._sleep(self.settle_delay)
        return self.is_reachable(gateway)
