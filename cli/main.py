import argparse
import logging
import sys

from cli.output import print_result, print_results, print_summary
from core.config import get_settings, load_config
from core.errors import ConfigurationError, ScanAborted
from pipeline.coordinator import ScanCoordinator

VERSION = "1.0.1"

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    # -h is the host flag, so help is long-form only
    p = argparse.ArgumentParser(prog="rscan", description="TCP Network scanning utility", add_help=False)
    p.add_argument("--help", action="help", help="Show this help message and exit")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    p.add_argument("-h", "--host", help="Sets the host (or IP address) to scan")
    p.add_argument("-s", "--start", dest="start_port", help="Sets the initial port that needs to be scanned")
    p.add_argument("-e", "--end", dest="end_port", help="Sets the last port that needs to be scanned")
    p.add_argument("-c", "--threads", help="Sets the number of threads to use")
    p.add_argument(
        "-t",
        "--timeout",
        help="Sets the connection timeout (in milliseconds) before a port is marked as closed",
    )
    p.add_argument("-n", "--noclosed", action="store_true", help="Do not output closed ports")
    p.add_argument("-u", "--unsorted", action="store_true", help="Do not sort the output by port number")
    p.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Display results while scanning instead of waiting until the scan has completed",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def _prompt_host() -> str:
    try:
        return input("Host: ")
    except EOFError:
        return ""


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    host = args.host if args.host is not None else _prompt_host()

    try:
        _configure_logging(args.verbose)
        config = load_config(
            host,
            start_port=args.start_port,
            end_port=args.end_port,
            threads=args.threads,
            timeout_ms=args.timeout,
            suppress_closed=args.noclosed,
            sort=not args.unsorted,
            interactive=args.interactive,
        )
        coordinator = ScanCoordinator(config, on_result=print_result, on_complete=print_results)
        coordinator.run()
    except ConfigurationError as exc:
        print(f"rscan: {exc.message}", file=sys.stderr)
        return EXIT_CONFIG
    except ScanAborted as exc:
        print(f"rscan: {exc.message}", file=sys.stderr)
        return EXIT_ABORTED

    if args.verbose and coordinator.summary is not None:
        print_summary(coordinator.summary)
    return EXIT_OK


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
