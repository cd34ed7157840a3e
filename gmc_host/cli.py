"""
Command-line tools for GMC Host.

gmc-read: connect, run every query once and print the results.
gmc-ports: list serial ports.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gmc_host.commands import Session
from gmc_host.config import Config, LoggingConfig, load_config
from gmc_host.ports import list_ports
from gmc_host.protocol import GmcError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)-8s] %(name)-20s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure root logging from a LoggingConfig."""
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)
    handlers: List[logging.Handler] = []
    if config.log_file:
        handlers.append(logging.FileHandler(Path(config.log_file).expanduser()))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, handlers=handlers)


def print_ports() -> int:
    """Print discovered serial ports. Returns number of ports."""
    ports = list_ports()
    if not ports:
        print("No ports found")
        return 0

    for port in ports:
        print(f"Found port: {port.name}")
        if port.is_usb:
            print(f"\tUSB ID:\t{port.usb_id}")
            print(f"\tUSB Serial:\t{port.serial_number or ''}")
    return len(ports)


def _build_config(args: argparse.Namespace) -> Config:
    config = load_config(Path(args.config) if args.config else None)

    overrides = {}
    if args.port is not None:
        overrides["port"] = args.port
    if args.baud is not None:
        overrides["baud"] = args.baud
    if args.settle_ms is not None:
        overrides["settle_delay_ms"] = args.settle_ms
    if overrides:
        serial_config = config.serial.model_validate({**config.serial.model_dump(), **overrides})
        config = config.model_copy(update={"serial": serial_config})
    return config


def read_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for gmc-read tool."""
    parser = argparse.ArgumentParser(description="Read status from a GMC Geiger counter")
    parser.add_argument("--port", default=None, help="Serial port (default from config)")
    parser.add_argument("--baud", type=int, default=None, help="Baud rate")
    parser.add_argument("--settle-ms", type=int, default=None, help="Settle delay in ms")
    parser.add_argument("--config", default=None, help="Config TOML file")
    parser.add_argument("--list-ports", action="store_true", help="List serial ports first")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    try:
        config = _build_config(args)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging, args.verbose)

    if args.list_ports:
        print_ports()

    queries = [
        ("Version", "get_ver"),
        ("CPM", "get_cpm"),
        ("CPML", "get_cpml"),
        ("CPMH", "get_cpmh"),
        ("CPS", "get_cps"),
        ("CPSL", "get_cpsl"),
        ("CPSH", "get_cpsh"),
        ("CFG", "get_cfg"),
        ("DateTime", "get_datetime"),
    ]

    try:
        with Session(config.serial, frame_dump=config.logging.frame_dump) as session:
            for label, method in queries:
                value = getattr(session, method)()
                if isinstance(value, str):
                    print(f"{label}: {value!r}")
                else:
                    print(f"{label}: {value}")

    except GmcError as e:
        logger.error(f"Aborting: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def ports_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for gmc-ports tool."""
    parser = argparse.ArgumentParser(description="List serial ports")
    parser.parse_args(argv)
    print_ports()
    return 0


if __name__ == "__main__":
    sys.exit(read_main())
