# main.py
import argparse
import os
import sys
from pathlib import Path
import yaml
from errors import ReconcileError
from logger import log, set_verbose
from settings import load_settings, CONFIG_FILE
from state import ReconciliationContext, Mode

def _interface_arg(value: str) -> str:
    if value.lower() == "all":
        return "all"
    if value.isdigit() and int(value) >= 1:
        return value
    raise argparse.ArgumentTypeError(f"expected an interface number or 'all', got '{value}'")

def _seconds_arg(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected seconds, got '{value}'") from None
    if seconds < 0:
        raise argparse.ArgumentTypeError("delay cannot be negative")
    return seconds

def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dr-ipswitch",
        description="Switch interfaces between production, DR and DHCP addressing.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-dhcp", dest="mode", action="store_const", const=Mode.DHCP,
                      help="Force DHCP on the selected interface(s)")
    mode.add_argument("-setprod", dest="mode", action="store_const", const=Mode.PRODUCTION,
                      help="Apply the stored production configuration")
    mode.add_argument("-setdr", dest="mode", action="store_const", const=Mode.DR,
                      help="Apply the stored DR configuration")
    mode.add_argument("-list", dest="list_only", action="store_true",
                      help="Show active interfaces and their stored snapshots")
    parser.set_defaults(mode=Mode.AUTO)
    parser.add_argument("-interface", type=_interface_arg, nargs="?", const="all",
                        default=None, metavar="{N|all}",
                        help="Interface number (1-based) or 'all' (default)")
    parser.add_argument("-path", dest="base_dir", metavar="DIR",
                        help="Directory holding the snapshot CSV files")
    parser.add_argument("-config", default=str(CONFIG_FILE), metavar="FILE",
                        help=f"Settings file (default {CONFIG_FILE})")
    parser.add_argument("-settle", type=_seconds_arg, metavar="SECONDS",
                        help="Delay before re-testing a gateway after a change")
    parser.add_argument("-verbose", action="store_true", help="Log progress to the console")
    return parser.parse_args(argv)

def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is None or geteuid() == 0

def main(argv=None) -> int:
    args = parse_arguments(argv)
    set_verbose(args.verbose)

    try:
        settings = load_settings(Path(args.config))
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        log.error(f"Invalid settings file {args.config}: {e}")
        return 2

    if not args.list_only and not _is_root():
        print("ERROR: dr-ipswitch must be run as root.", file=sys.stderr)
        return 1

    context = ReconciliationContext(
        mode=args.mode,
        interface=args.interface,
        base_dir=args.base_dir or settings.base_dir,
        settle_delay=settings.settle_delay if args.settle is None else args.settle,
        ping_attempts=settings.ping_attempts,
    )

    from network.probe import LinuxNetworkProbe
    from failover.orchestrator import Orchestrator
    probe = LinuxNetworkProbe(
        netplan_dir=settings.netplan_dir,
        persist_netplan=settings.persist_netplan,
        ping_timeout=settings.ping_timeout,
    )
    orchestrator = Orchestrator.from_context(probe, context)

    try:
        if args.list_only:
            for line in orchestrator.describe():
                print(line)
            return 0
        results = orchestrator.run()
    except ReconcileError as e:
        log.critical(f"Aborting: {e}")
        return 1

    log.info(f"Done, {len(results)} interface(s) processed")
    return 0

def run() -> None:
    sys.exit(main())

if __name__ == "__main__":
    run()
