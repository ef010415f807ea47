# logger.py
import logging
import sys

LOG_FILE = "/var/log/dr_ipswitch.log"
FALLBACK_LOG_FILE = "/tmp/dr_ipswitch.log"

def setup_logger() -> logging.Logger:
    logger = logging.getLogger("dr_ipswitch")
    logger.setLevel(logging.DEBUG)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # Try to write to log file; fall back to /tmp if /var/log not writable
    try:
        fh = logging.FileHandler(LOG_FILE)
    except PermissionError:
        fh = logging.FileHandler(FALLBACK_LOG_FILE)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.WARNING)
    sh.setFormatter(fmt)

    if not logger.handlers:
        logger.addHandler(fh)
        logger.addHandler(sh)
    return logger

def set_verbose(verbose: bool) -> None:
    """Show INFO on the console as well (file always gets DEBUG)."""
    for handler in log.handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(logging.INFO if verbose else logging.WARNING)

log = setup_logger()
