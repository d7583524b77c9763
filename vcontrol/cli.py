"""Command line interface for reading and writing controller values."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import yaml

from .catalog import Catalog
from .client import VControl
from .errors import InvalidFormatError, VControlError
from .optolink import Optolink
from .protocol import Protocol
from .value import OutputValue, from_json

log = logging.getLogger(__name__)

DEFAULT_CATALOG = "codegen"
DEFAULT_SCAN_CACHE = "scan-cache.yml"
DEFAULT_HOST = "localhost"

_MAX_ADDR = 0xFFFF
_ERRORS = (OSError, EOFError, VControlError, yaml.YAMLError)


def dump(client: Any) -> dict[str, OutputValue]:
    """Print every readable, non-empty value and return what was read."""
    commands = dict(client._catalog.system_commands)
    commands.update(client.device.commands)

    values: dict[str, OutputValue] = {}
    for name in sorted(commands):
        if not commands[name].access_mode.is_read():
            continue
        try:
            output = client.get(name)
        except (OSError, EOFError, VControlError) as err:
            print(f"{name} error: {err!r}", file=sys.stderr)
            continue
        if output.value is None:
            continue
        print(f"{name}:")
        print(output)
        values[name] = output
    return values


def _load_cache(handle: Any) -> dict[int, int]:
    handle.seek(0)
    try:
        data = yaml.safe_load(handle)
    except yaml.YAMLError:
        return {}
    return data if isinstance(data, dict) else {}


def scan(optolink: Any, protocol: Any, cache_path: Union[str, Path]) -> dict[int, int]:
    """Read every address once, appending new values to the cache file."""
    found: dict[int, int] = {}
    with open(cache_path, "a+", encoding="utf-8") as handle:
        cache = _load_cache(handle)
        handle.seek(0, 2)

        for addr in range(_MAX_ADDR):
            print(f"\r{addr}/{_MAX_ADDR}", end="", flush=True)
            if addr in cache:
                continue

            while True:
                try:
                    value = protocol.get(optolink, addr, 1)[0]
                except (OSError, EOFError, VControlError) as err:
                    print(f"Error: {err}", file=sys.stderr)
                    protocol.negotiate(optolink)
                    continue
                break

            handle.write(f"0x{addr:04X}: {value}\n")
            handle.flush()
            found[addr] = value

    print()
    return found


def _input_value(text: str) -> Any:
    try:
        return from_json(json.loads(text))
    except (ValueError, InvalidFormatError):
        return text


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vcontrol", add_help=False)
    parser.add_argument("-?", "--help", action="help", help="show this help message and exit")
    parser.add_argument("-d", "--device", help="path of the device")
    parser.add_argument("-h", "--host", help=f"hostname or IP address of the device (default: {DEFAULT_HOST})")
    parser.add_argument("-p", "--port", help="port of the device")
    parser.add_argument(
        "-c", "--catalog", default=DEFAULT_CATALOG, help="directory holding the command and device definitions"
    )

    subcommands = parser.add_subparsers(dest="command", required=True)

    get_parser = subcommands.add_parser("get", help="get value")
    get_parser.add_argument("name", metavar="command", help="name of the command")

    set_parser = subcommands.add_parser("set", help="set value")
    set_parser.add_argument("name", metavar="command", help="name of the command")
    set_parser.add_argument("value", help="value")

    subcommands.add_parser("dump", help="print all readable values")

    scan_parser = subcommands.add_parser("scan", help="read every address into a cache file")
    scan_parser.add_argument("--cache", default=DEFAULT_SCAN_CACHE, help="file the values are appended to")

    return parser


def _parse_port(text: str) -> Optional[int]:
    try:
        port = int(text)
    except ValueError:
        return None
    return port if 0 <= port <= 0xFFFF else None


def _open(args: argparse.Namespace, port: Optional[int]) -> Optolink:
    if args.device is not None:
        return Optolink.open(args.device)
    return Optolink.connect(args.host or DEFAULT_HOST, port)


def _run_scan(args: argparse.Namespace, port: Optional[int]) -> None:
    with _open(args, port) as optolink:
        protocol = Protocol.detect(optolink)
        if protocol is None:
            raise VControlError("no protocol detected")
        scan(optolink, protocol, args.cache)


def _run(args: argparse.Namespace, port: Optional[int]) -> None:
    catalog = Catalog.load(args.catalog)
    optolink = _open(args, port)
    try:
        client = VControl.connect(optolink, catalog)
    except BaseException:
        optolink.close()
        raise

    with client:
        log.info("Connected to '%s' via %s protocol.", client.device.name, client.protocol)
        if args.command == "get":
            output = client.get(args.name)
            print(json.dumps(output.to_json(), indent=2, ensure_ascii=False))
        elif args.command == "set":
            client.set(args.name, _input_value(args.value))
        else:
            dump(client)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line interface and return the exit status."""
    logging.basicConfig()
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()

    if not argv:
        parser.print_help()
        return 2

    args = parser.parse_args(argv)

    if args.device is not None and (args.host is not None or args.port is not None):
        parser.error("--device cannot be used with --host or --port")
    if args.host is not None and args.port is None:
        parser.error("--host requires --port")
    if args.device is None and args.port is None:
        parser.error("either --device or --port is required")

    port: Optional[int] = None
    if args.port is not None:
        port = _parse_port(args.port)
        if port is None:
            print(f"Error: Could not parse port from “{args.port}”.", file=sys.stderr)
            return 1

    try:
        if args.command == "scan":
            _run_scan(args, port)
        else:
            _run(args, port)
    except _ERRORS as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())