# network/checks.py
from __future__ import annotations
import subprocess
from dataclasses import dataclass
from typing import Optional
from logger import log

PING_TIMEOUT = 2


@dataclass
class CheckResult:
    label: str
    target: str
    passed: bool
    error: str = ""

    @property
    def status_icon(self) -> str:
        return "✓" if self.passed else "✗"

    def __str__(self) -> str:
        status = "PASS" if self.passed else f"FAIL ({self.error})"
        return f"[{self.status_icon}] {self.label}: {self.target} -> {status}"


def check_icmp(host: str, *, label: str, timeout: float = PING_TIMEOUT) -> CheckResult:
    """ICMP ping via 'ping -c1 -W<timeout>'."""
    try:
        result = subprocess.run(
            ["ping", "-c1", f"-W{max(1, int(timeout))}", host],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout + 2,
        )
        passed = (result.returncode == 0)
        log.info("ICMP check %s: %s", "PASS" if passed else "FAIL", host)
        return CheckResult(label=label, target=host, passed=passed,
                           error="" if passed else "no response")
    except subprocess.TimeoutExpired:
        log.warning("ICMP check TIMEOUT: %s", host)
        return CheckResult(label=label, target=host, passed=False, error="timeout")
    except OSError as e:
        log.warning("ICMP check ERROR: %s: %s", host, e)
        return CheckResult(label=label, target=host, passed=False, error=str(e))


def ping(address: Optional[str], attempts: int = 2,
         timeout: float = PING_TIMEOUT) -> bool:
    """True as soon as one of `attempts` echo requests is answered."""
    if not address:
        log.info("No address to ping, treating as unreachable")
        return False
    for attempt in range(1, attempts + 1):
        result = check_icmp(address, label=f"ping {attempt}/{attempts}",
                            timeout=timeout)
        log.debug(str(result))
        if result.passed:
            return True
    return False
