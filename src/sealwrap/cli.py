#!/usr/bin/env python3
"""
sealwrap CLI.

Usage:
    # Configure every seal in a server config and print its diagnostic info
    sealwrap status --config server.yaml

    # Print random bytes from the secure random reader
    sealwrap random -n 32
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional

from .configutil import (
    ConfigError,
    KMSConfigError,
    configure_wrapper,
    create_secure_random_reader,
    load_config_file,
)
from .version import sealwrap_version
from .wrapping import WrapperError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger("sealwrap")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="sealwrap",
        description="sealwrap: seal backend selection for a secrets server",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {sealwrap_version()}",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS),
        help="Log level (default: log_level from the config file, else info)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    status_parser = subparsers.add_parser(
        "status",
        help="Configure the seals in a config file and show their info",
    )
    status_parser.add_argument(
        "--config",
        required=True,
        help="Path to server configuration file (YAML or JSON)",
    )

    random_parser = subparsers.add_parser(
        "random",
        help="Print bytes from the secure random reader",
    )
    random_parser.add_argument(
        "-n", "--bytes",
        type=int,
        default=32,
        help="Number of bytes to read (default: 32)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVELS.get(args.log_level or "info"),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        "status": _handle_status,
        "random": _handle_random,
    }

    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _format_info(info_keys: List[str], info: Dict[str, str]) -> str:
    """Align info as 'Key: Value' lines, keys right-justified."""
    if not info_keys:
        return ""
    width = max(len(k) for k in info_keys)
    return "\n".join(f"{k:>{width}}: {info[k]}" for k in info_keys)


def _handle_status(args: argparse.Namespace) -> int:
    try:
        config = load_config_file(args.config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.log_level is None:
        logging.getLogger().setLevel(LOG_LEVELS.get(config.log_level, logging.INFO))

    seals = config.seals or []
    if not seals:
        print("No seal configured; using shamir")
        return 0

    info_keys: List[str] = []
    info: Dict[str, str] = {}
    wrappers = []
    try:
        for index, kms in enumerate(seals, start=1):
            label = "Seal Type" if not kms.disabled else "Disabled Seal Type"
            if len(seals) > 1:
                label = f"{label} {index}"
            info_keys.append(label)
            info[label] = kms.type
            wrapper = configure_wrapper(kms, info_keys, info, logger)
            if wrapper is not None:
                wrappers.append(wrapper)
    except (KMSConfigError, WrapperError) as e:
        print(f"Error configuring seal: {e}", file=sys.stderr)
        return 1
    finally:
        for wrapper in wrappers:
            wrapper.finalize()

    print(_format_info(info_keys, info))
    return 0


def _handle_random(args: argparse.Namespace) -> int:
    if args.bytes < 0:
        print("Error: --bytes must be non-negative", file=sys.stderr)
        return 1

    reader = create_secure_random_reader(None, None)
    print(reader.read(args.bytes).hex())
    return 0


if __name__ == "__main__":
    sys.exit(main())
